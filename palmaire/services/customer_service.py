"""
Customer Service - Customer sync from bookings
==============================================
This service handles:
1. Email normalization (customers are keyed by email)
2. Name sanitization and first/last split
3. Customer upsert logic (create or update by email)
"""

import re
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..models.customer import Customer


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def sanitize_name(name: str) -> str:
    """
    Clean a guest name:
    - drop control and markup characters
    - collapse whitespace
    """
    if not name:
        return ""

    cleaned = re.sub(r"[<>\"{}\\\x00-\x1f]", "", name)
    return " ".join(cleaned.split())


def split_guest_name(name: str) -> Tuple[str, str]:
    """
    Split a full name into (first, last).

    "Ana Maria Lopez" -> ("Ana", "Maria Lopez"), "Cher" -> ("Cher", "")
    """
    parts = sanitize_name(name).split(" ", 1)
    first = parts[0] if parts else ""
    last = parts[1] if len(parts) > 1 else ""
    return first, last


def upsert_customer_by_email(
    db: Session,
    name: str,
    email: str,
    phone: Optional[str] = None,
) -> Tuple[Customer, bool]:
    """
    Find the customer for an email or create one.

    An existing customer keeps their name; a missing phone is filled in.
    Flushes but does not commit.

    Returns:
        Tuple[Customer, bool]: (customer, created)
    """
    clean_email = normalize_email(email)
    existing = db.query(Customer).filter(Customer.email == clean_email).first()

    if existing:
        if phone and not existing.phone:
            existing.phone = phone.strip()
            db.flush()
        return existing, False

    first_name, last_name = split_guest_name(name)
    customer = Customer(
        first_name=first_name,
        last_name=last_name,
        email=clean_email,
        phone=phone.strip() if phone else None,
    )
    db.add(customer)
    db.flush()
    return customer, True
