"""
Contact relay tests. The outbound HTTP call is mocked.

Tests:
1-2. Successful relay and the payload sent
3-5. Relay failures fall back to the direct email address
6-7. Form validation
"""

import json
import urllib.error
from unittest.mock import MagicMock, patch

from calcsite.contact import SUCCESS_MESSAGE, build_payload, send_contact_message

FORM = {
    "name": "Dana",
    "email": "dana@example.com",
    "subject": "Mortgage question",
    "message": "Does the payment include PMI?",
}


def relay_response(status):
    response = MagicMock()
    response.__enter__.return_value.status = status
    return response


# ============================================================
# Successful relay
# ============================================================

@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_success(mock_urlopen, client):
    mock_urlopen.return_value = relay_response(200)

    response = client.post("/api/contact", json=FORM)

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": SUCCESS_MESSAGE, "fallback_email": None}


@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_payload(mock_urlopen):
    mock_urlopen.return_value = relay_response(200)

    send_contact_message(**FORM)

    request = mock_urlopen.call_args[0][0]
    assert request.full_url == "https://relay.test/f/contact"
    assert request.get_method() == "POST"
    body = json.loads(request.data.decode("utf-8"))
    assert body == build_payload(**FORM)
    assert body["_replyto"] == "dana@example.com"
    assert body["_subject"] == "Contact Form: Mortgage question"
    assert mock_urlopen.call_args[1]["timeout"] == 15.0


# ============================================================
# Relay failures
# ============================================================

@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_http_error(mock_urlopen, client):
    mock_urlopen.side_effect = urllib.error.HTTPError(
        "https://relay.test/f/contact", 500, "Server Error", hdrs=None, fp=None)

    data = client.post("/api/contact", json=FORM).json()

    assert data["status"] == "error"
    assert data["fallback_email"] == "help@calc.test"
    assert "help@calc.test" in data["message"]


@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_network_error(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.URLError("connection refused")
    assert send_contact_message(**FORM)["status"] == "error"

    mock_urlopen.side_effect = TimeoutError()
    assert send_contact_message(**FORM)["status"] == "error"


@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_non_2xx_status(mock_urlopen):
    mock_urlopen.return_value = relay_response(304)
    assert send_contact_message(**FORM)["status"] == "error"


# ============================================================
# Form validation
# ============================================================

@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_rejects_blank_fields(mock_urlopen, client):
    response = client.post("/api/contact", json={**FORM, "name": "   "})
    assert response.status_code == 422
    mock_urlopen.assert_not_called()


@patch("calcsite.contact.urllib.request.urlopen")
def test_contact_rejects_bad_email(mock_urlopen, client):
    response = client.post("/api/contact", json={**FORM, "email": "not-an-email"})
    assert response.status_code == 422
    mock_urlopen.assert_not_called()
