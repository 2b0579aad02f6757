"""
Shared test fixtures: settings overrides and the API test client.
"""

import os
import pytest
from fastapi.testclient import TestClient

# Settings are read at import time, so override them before importing the app
os.environ["SITE_URL"] = "https://calc.test"
os.environ["CONTACT_RELAY_URL"] = "https://relay.test/f/contact"
os.environ["CONTACT_FALLBACK_EMAIL"] = "help@calc.test"

from calcsite.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)
