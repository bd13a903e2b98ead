import logging

from fastapi import APIRouter, Request

from ..schemas.contact import ContactCreate, ContactResponse
from ..services.crm_client import CRMClient, ContactFormData
from ..utils.rate_limiter import limiter, get_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["Contacts"])


@router.post("", response_model=ContactResponse)
@router.post("/", response_model=ContactResponse)
@limiter.limit(get_rate_limit("contact"))
def submit_contact(request: Request, contact: ContactCreate):
    """Website contact form, forwarded to the CRM as a lead"""
    result = CRMClient().submit_contact_form(ContactFormData(
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        message=contact.message,
        preferred_dates=contact.preferred_dates,
        unit_id=contact.unit_id,
        check_in=contact.check_in,
        check_out=contact.check_out,
        guests=contact.guests,
    ))
    logger.info("Contact form submitted for %s", contact.email)
    return ContactResponse(message="Contact created successfully", data=result)
