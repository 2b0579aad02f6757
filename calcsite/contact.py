"""
Contact form relay. Forwards a submission to the hosted form service, which
emails it on to the site owner.
"""

import json
import logging
import urllib.error
import urllib.request

from .config import settings

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Thank you! Your message has been sent successfully."


def build_payload(name: str, email: str, subject: str, message: str) -> dict:
    return {
        "name": name,
        "email": email,
        "subject": subject,
        "message": message,
        "_replyto": email,
        "_subject": f"Contact Form: {subject}",
    }


def failure_response() -> dict:
    fallback = settings.CONTACT_FALLBACK_EMAIL
    return {
        "status": "error",
        "message": f"Failed to send message. Please try emailing us directly at {fallback}",
        "fallback_email": fallback,
    }


def send_contact_message(name: str, email: str, subject: str, message: str) -> dict:
    """
    POST the submission to CONTACT_RELAY_URL.
    Returns a success or error status dict. Never raises for relay failures.
    """
    payload = json.dumps(build_payload(name, email, subject, message)).encode("utf-8")
    req = urllib.request.Request(
        settings.CONTACT_RELAY_URL, data=payload,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
        method="POST",
    )

    try:
        with urllib.request.urlopen(req, timeout=settings.CONTACT_TIMEOUT_SECONDS) as response:
            status = response.status
    except urllib.error.HTTPError as e:
        logger.warning(f"Contact relay rejected submission: HTTP {e.code}")
        return failure_response()
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        logger.warning(f"Contact relay unreachable: {e}")
        return failure_response()

    if not 200 <= status < 300:
        logger.warning(f"Contact relay returned HTTP {status}")
        return failure_response()

    logger.info("Contact message relayed for %s", email)
    return {"status": "success", "message": SUCCESS_MESSAGE}
