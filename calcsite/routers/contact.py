from fastapi import APIRouter

from ..contact import send_contact_message
from ..schemas import ContactRequest, ContactResponse

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=ContactResponse)
def submit_contact(request: ContactRequest):
    """Relay failures come back as status "error" with a fallback address, still HTTP 200."""
    return send_contact_message(
        name=request.name,
        email=request.email,
        subject=request.subject,
        message=request.message,
    )
