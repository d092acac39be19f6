"""
CUSTOMER RECORD MANAGER
=======================

Operation        | Missing id  | Email check                     | Fields written
-----------------|-------------|---------------------------------|---------------------------
create           | n/a         | any stored record               | name, email, address
full update      | NotFound    | any record except this id       | all three, even if None
partial update   | NotFound    | only if email supplied, ditto   | only supplied (non-None)
delete           | NotFound    | n/a                             | row removed

INVARIANTS:
- At most one stored customer holds a given non-null email.
- The conflict check for updates compares by id, so re-saving a customer with
  its own email is never a conflict.

The pre-check is best effort. The unique constraint on customers.email is the
real guard: a flush that trips it is rolled back and reported as
EmailAlreadyExists, the same as a detected conflict.

Functions here only flush; the caller owns the transaction and commits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crm.errors import CustomerNotFound, EmailAlreadyExists
from app.crm.modules.customers.models import Customer

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "email", "address")

# Signed 64-bit INTEGER; larger ids cannot be bound as query parameters.
MAX_CUSTOMER_ID = 2**63 - 1


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str


def validate_customer_payload(payload: Any) -> list[ValidationError]:
    """Shape check for create/update bodies. Missing or null fields are allowed."""
    if not isinstance(payload, dict):
        return [ValidationError("body", "Request body must be a JSON object.")]
    errs: list[ValidationError] = []
    for field in CUSTOMER_FIELDS:
        value = payload.get(field)
        if value is not None and not isinstance(value, str):
            errs.append(ValidationError(field, f"Field '{field}' must be a string."))
    return errs


def list_customers(s: Session) -> list[Customer]:
    return list(s.scalars(select(Customer).order_by(Customer.id)))


def get_customer_by_id(s: Session, customer_id: int) -> Customer:
    if not 0 < customer_id <= MAX_CUSTOMER_ID:
        raise CustomerNotFound(customer_id)
    c = s.get(Customer, customer_id)
    if c is None:
        raise CustomerNotFound(customer_id)
    return c


def email_taken(s: Session, email: str | None, *, exclude_id: int | None = None) -> bool:
    """True if a stored customer other than `exclude_id` already holds `email`."""
    if email is None:
        return False
    q = select(Customer.id).where(Customer.email == email)
    if exclude_id is not None:
        q = q.where(Customer.id != exclude_id)
    return s.scalars(q.limit(1)).first() is not None


def _flush_or_conflict(s: Session, email: str | None) -> None:
    try:
        s.flush()
    except IntegrityError:
        # Lost a race with a concurrent writer holding the same email.
        s.rollback()
        logger.warning("Unique constraint rejected email=%s after pre-check passed", email)
        raise EmailAlreadyExists(email)


def create_customer(s: Session, payload: dict[str, Any]) -> Customer:
    email = payload.get("email")
    if email_taken(s, email):
        raise EmailAlreadyExists(email)

    c = Customer(
        name=payload.get("name"),
        email=email,
        address=payload.get("address"),
    )
    s.add(c)
    _flush_or_conflict(s, email)
    logger.info("Created customer id=%s", c.id)
    return c


def full_update_customer(s: Session, customer_id: int, payload: dict[str, Any]) -> Customer:
    c = get_customer_by_id(s, customer_id)

    email = payload.get("email")
    if email_taken(s, email, exclude_id=c.id):
        raise EmailAlreadyExists(email)

    # Full replace: absent fields become None.
    c.name = payload.get("name")
    c.email = email
    c.address = payload.get("address")

    _flush_or_conflict(s, email)
    logger.info("Replaced customer id=%s", c.id)
    return c


def partial_update_customer(s: Session, customer_id: int, payload: dict[str, Any]) -> Customer:
    c = get_customer_by_id(s, customer_id)

    email = payload.get("email")
    if email_taken(s, email, exclude_id=c.id):
        raise EmailAlreadyExists(email)

    changed: list[str] = []
    for field in CUSTOMER_FIELDS:
        value = payload.get(field)
        if value is not None:
            setattr(c, field, value)
            changed.append(field)

    _flush_or_conflict(s, email)
    logger.info("Patched customer id=%s fields=%s", c.id, ",".join(changed) or "-")
    return c


def delete_customer(s: Session, customer_id: int) -> None:
    c = get_customer_by_id(s, customer_id)
    s.delete(c)
    s.flush()
    logger.info("Deleted customer id=%s", customer_id)
