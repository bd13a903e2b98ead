"""
CRM Client (GoHighLevel)

Thin wrapper over the CRM REST API:
- Bearer token authentication
- Each configured base URL is tried in order until one accepts the request
- Booking sync: contact with booking custom fields, then a follow-up task

Failures raise CRMError. Booking creation treats the sync as best effort.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .customer_service import split_guest_name
from .exceptions import CRMError

logger = logging.getLogger(__name__)


def format_dollars(cents: int) -> str:
    return f"${cents / 100:,.2f}"


@dataclass
class CRMContact:
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    source: str = "Website Booking"
    custom_fields: Dict[str, Any] = field(default_factory=dict)
    notes: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone or "",
            "source": self.source,
            "customFields": self.custom_fields,
            "notes": self.notes,
        }


@dataclass
class BookingSyncData:
    """What the CRM needs to know about a new booking"""
    booking_id: str
    guest_name: str
    guest_email: str
    guest_phone: Optional[str]
    check_in: date
    check_out: date
    unit_name: str
    total_cents: int
    special_requests: Optional[str] = None


@dataclass
class ContactFormData:
    name: str
    email: str
    phone: str
    message: str
    preferred_dates: Optional[str] = None
    unit_id: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    guests: Optional[str] = None


@dataclass
class CRMSyncResult:
    contact: Dict[str, Any]
    task: Optional[Dict[str, Any]] = None

    @property
    def contact_id(self) -> Optional[str]:
        contact = self.contact.get("contact", self.contact)
        return contact.get("id") or contact.get("contactId")


class CRMClient:
    """
    Usage:
        client = CRMClient()
        result = client.sync_booking(BookingSyncData(...))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_urls: Optional[List[str]] = None,
        timeout: Optional[float] = None,
        source_name: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.crm_api_key
        self.base_urls = base_urls or settings.crm_base_url_list
        self.timeout = timeout or settings.crm_timeout_seconds
        self.source_name = source_name or settings.crm_source_name
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the first base URL that accepts the request"""
        if not self.is_configured:
            raise CRMError("CRM API key not configured")

        last_error = None
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            for base_url in self.base_urls:
                url = f"{base_url}{path}"
                try:
                    response = client.post(url, headers=self._get_headers(), json=payload)
                except httpx.HTTPError as e:
                    logger.warning("CRM request to %s failed: %s", url, e)
                    last_error = f"{base_url}: {e}"
                    continue

                if response.is_success:
                    logger.info("CRM accepted %s via %s", path, base_url)
                    try:
                        return response.json()
                    except ValueError:
                        return {}

                logger.warning("CRM endpoint %s returned %s: %s", url, response.status_code, response.text[:200])
                last_error = f"{base_url}: HTTP {response.status_code}"

        raise CRMError(f"All CRM endpoints failed ({last_error})")

    def create_contact(self, contact: CRMContact) -> Dict[str, Any]:
        return self._post("/contacts/", contact.to_payload())

    def create_contact_task(self, contact_id: str, title: str, body: str, due_date: date) -> Dict[str, Any]:
        payload = {
            "title": title,
            "body": body,
            "contactId": contact_id,
            "dueDate": due_date.isoformat(),
        }
        return self._post(f"/contacts/{contact_id}/tasks", payload)

    def sync_booking(self, booking: BookingSyncData) -> CRMSyncResult:
        """
        Create the guest contact with booking details, then a follow-up task.

        The task is optional: its failure is logged and the contact result
        is still returned.
        """
        first_name, last_name = split_guest_name(booking.guest_name)
        amount = format_dollars(booking.total_cents)

        contact = CRMContact(
            first_name=first_name,
            last_name=last_name,
            email=booking.guest_email,
            phone=booking.guest_phone,
            source=f"Website Booking - {self.source_name}",
            custom_fields={
                "booking_unit": booking.unit_name,
                "check_in_date": booking.check_in.isoformat(),
                "check_out_date": booking.check_out.isoformat(),
                "booking_amount": amount,
                "special_requests": booking.special_requests or "",
                "booking_source": self.source_name,
            },
            notes="\n".join([
                "Booking Details:",
                f"- Booking ID: {booking.booking_id}",
                f"- Unit: {booking.unit_name}",
                f"- Check-in: {booking.check_in.isoformat()}",
                f"- Check-out: {booking.check_out.isoformat()}",
                f"- Total Amount: {amount}",
                f"- Special Requests: {booking.special_requests or 'None'}",
            ]),
        )
        result = CRMSyncResult(contact=self.create_contact(contact))

        contact_id = result.contact_id
        if contact_id:
            try:
                result.task = self.create_contact_task(
                    contact_id,
                    title=f"{booking.unit_name} booking - {booking.check_in.isoformat()}",
                    body=(
                        f"Check-in: {booking.check_in.isoformat()}\n"
                        f"Check-out: {booking.check_out.isoformat()}\n"
                        f"Guest: {booking.guest_email}\n"
                        f"Phone: {booking.guest_phone or 'N/A'}\n"
                        f"Booking ID: {booking.booking_id}"
                    ),
                    due_date=booking.check_in,
                )
            except CRMError as e:
                logger.warning("CRM task for booking %s not created: %s", booking.booking_id, e)

        return result

    def submit_contact_form(self, form: ContactFormData) -> Dict[str, Any]:
        """Website contact form lead"""
        first_name, last_name = split_guest_name(form.name)
        contact = CRMContact(
            first_name=first_name,
            last_name=last_name,
            email=form.email,
            phone=form.phone,
            source="Website Contact Form",
            custom_fields={
                "preferred_dates": form.preferred_dates or "",
                "message": form.message,
                "unit_inquiry": form.unit_id or "",
                "check_in": form.check_in or "",
                "check_out": form.check_out or "",
                "guests": form.guests or "",
                "website_source": f"{self.source_name} Contact Form",
            },
            notes="\n".join([
                "Contact Form Submission:",
                f"Message: {form.message}",
                f"Preferred Dates: {form.preferred_dates or 'Not specified'}",
                f"Unit Interest: {form.unit_id or 'General inquiry'}",
            ]),
        )
        return self.create_contact(contact)
