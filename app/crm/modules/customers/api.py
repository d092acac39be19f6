from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from app.crm.db import db_session
from app.crm.errors import InvalidPayload
from app.crm.modules.customers.models import Customer
from app.crm.modules.customers.service import (
    create_customer,
    delete_customer,
    full_update_customer,
    get_customer_by_id,
    list_customers,
    partial_update_customer,
    validate_customer_payload,
)

bp = Blueprint("customers", __name__)


def customer_to_dict(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "email": c.email,
        "address": c.address,
    }


def _payload() -> dict[str, Any]:
    # silent=True: a malformed or non-JSON body is reported through the same validation path.
    payload = request.get_json(silent=True)
    errs = validate_customer_payload(payload)
    if errs:
        raise InvalidPayload(errs[0].message)
    return payload


# ---------- List ----------
@bp.get("/customers")
def customers_list():
    s = db_session()
    return jsonify([customer_to_dict(c) for c in list_customers(s)])


# ---------- Create ----------
@bp.post("/customers")
def customers_create():
    s = db_session()
    c = create_customer(s, _payload())
    s.commit()
    return customer_to_dict(c), 201


# ---------- Detail ----------
@bp.get("/customers/<int:customer_id>")
def customer_detail(customer_id: int):
    s = db_session()
    return customer_to_dict(get_customer_by_id(s, customer_id))


# ---------- Update ----------
@bp.put("/customers/<int:customer_id>")
def customer_full_update(customer_id: int):
    s = db_session()
    c = full_update_customer(s, customer_id, _payload())
    s.commit()
    return customer_to_dict(c)


@bp.patch("/customers/<int:customer_id>")
def customer_partial_update(customer_id: int):
    s = db_session()
    c = partial_update_customer(s, customer_id, _payload())
    s.commit()
    return customer_to_dict(c)


# ---------- Delete ----------
@bp.delete("/customers/<int:customer_id>")
def customer_delete(customer_id: int):
    s = db_session()
    delete_customer(s, customer_id)
    s.commit()
    return "", 204
