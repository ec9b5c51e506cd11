# Overview: Boundary validation for request payloads; runs before any mutation.

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from .constants import BRANCHES, CREDIT_STATUSES, ROLES
from .errors import InvalidStatus, ValidationError
from .time_utils import parse_iso_datetime, utcnow
from .units import CENTS_PER_UNIT, KG_PER_TONNE, MAX_MINOR_UNITS, decimal_places, parse_decimal, to_minor


CONTACT_RE = re.compile(r"^[0-9]{10,15}$")
# No nested quantifiers: each part is one character class
EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class FieldPolicy:
    """
    Maps wire (camelCase) field names to model attributes.

    writable: wire name -> model attribute, the only keys a client may set
    required_on_create: wire names that must be present for POST
    """
    writable: dict[str, str]
    required_on_create: frozenset[str] = frozenset()


PRODUCE_POLICY = FieldPolicy(
    writable={
        "name": "name",
        "type": "type",
        "stock": "stock_kg",
        "cost": "cost_cents",
        "salePrice": "sale_price_cents",
        "dealerName": "dealer_name",
        "contact": "contact",
        "branch": "branch",
    },
    required_on_create=frozenset({
        "name", "type", "stock", "cost", "salePrice", "dealerName", "contact", "branch",
    }),
)

# Branch and stock are fixed after procurement; stock moves only through sales.
PRODUCE_UPDATE_FIELDS = frozenset({"name", "type", "cost", "salePrice", "dealerName", "contact"})


class _Collector:
    """Accumulates field errors so a client sees every problem at once."""

    def __init__(self, payload: Any):
        self.payload = payload if isinstance(payload, dict) else {}
        self.errors: list[str] = []
        self.clean: dict[str, Any] = {}

    def present(self, key: str) -> bool:
        value = self.payload.get(key)
        return value is not None and not (isinstance(value, str) and not value.strip())

    def text(self, key: str, label: str, min_length: int, attr: str | None = None) -> None:
        value = self.payload.get(key)
        if not isinstance(value, str) or len(value.strip()) < min_length:
            if min_length > 1:
                self.errors.append(f"{label} must be at least {min_length} characters")
            else:
                self.errors.append(f"{label} is required")
            return
        self.clean[attr or key] = value.strip()

    def number(
        self,
        key: str,
        label: str,
        *,
        scale: int,
        minimum: int,
        inclusive: bool,
        attr: str | None = None,
    ) -> None:
        """Parse an exact decimal and store it as integer minor units (value * scale)."""
        value = self.payload.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            self.errors.append(f"{label} is required")
            return
        number = parse_decimal(value)
        if number is None:
            self.errors.append(f"{label} must be a number")
            return
        if number < minimum or (not inclusive and number == minimum):
            kind = "a non-negative" if inclusive and minimum == 0 else "a positive"
            self.errors.append(f"{label} must be {kind} number")
            return
        if number > Decimal(MAX_MINOR_UNITS) / scale:
            self.errors.append(f"{label} is too large")
            return
        minor = to_minor(number, scale)
        if minor is None:
            self.errors.append(f"{label} supports at most {decimal_places(scale)} decimal places")
            return
        self.clean[attr or key] = minor

    def contact(self, key: str, label: str = "Contact", attr: str | None = None) -> None:
        value = self.payload.get(key)
        if value is None or value == "":
            self.errors.append(f"{label} is required")
            return
        value = str(value).strip()
        if not CONTACT_RE.match(value):
            self.errors.append(f"{label} must be a valid phone number (10-15 digits)")
            return
        self.clean[attr or key] = value

    def choice(self, key: str, choices: tuple[str, ...], message: str, attr: str | None = None) -> None:
        value = self.payload.get(key)
        if value not in choices:
            self.errors.append(message)
            return
        self.clean[attr or key] = value

    def raise_if_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def validate_registration(payload: Any) -> dict:
    c = _Collector(payload)
    c.text("name", "Name", 3)

    email = c.payload.get("email")
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        c.errors.append("Please provide a valid email")
    else:
        c.clean["email"] = email.strip().lower()

    password = c.payload.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        c.errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    elif password != c.payload.get("confirmPassword"):
        c.errors.append("Passwords do not match")
    else:
        c.clean["password"] = password

    c.choice("role", ROLES, f"Role must be one of: {', '.join(ROLES)}")
    c.choice("branch", BRANCHES, "Valid branch is required (branch1 or branch2)")
    c.contact("contact", "Contact number")
    c.raise_if_errors()
    return c.clean


def validate_login(payload: Any) -> tuple[str, str]:
    c = _Collector(payload)
    email = c.payload.get("email")
    password = c.payload.get("password")
    if not isinstance(email, str) or not email.strip():
        c.errors.append("Email is required")
    if not isinstance(password, str) or not password:
        c.errors.append("Password is required")
    c.raise_if_errors()
    return email.strip().lower(), password


def validate_procurement(payload: Any, *, partial: bool = False) -> dict:
    """
    Validate a procurement payload and return model-attribute keyed values.

    partial=True: update semantics; only PRODUCE_UPDATE_FIELDS are accepted
    and each is checked only when present.
    """
    c = _Collector(payload)
    if partial:
        fixed = sorted(k for k in c.payload if k in PRODUCE_POLICY.writable and k not in PRODUCE_UPDATE_FIELDS)
        for key in fixed:
            c.errors.append(f"{key} cannot be changed after procurement")
        wanted = {k for k in PRODUCE_UPDATE_FIELDS if k in c.payload}
        if not wanted and not fixed:
            c.errors.append("No updatable fields provided")
    else:
        wanted = set(PRODUCE_POLICY.required_on_create)

    attrs = PRODUCE_POLICY.writable
    if "name" in wanted:
        c.text("name", "Produce name", 2, attr=attrs["name"])
    if "type" in wanted:
        c.text("type", "Produce type", 2, attr=attrs["type"])
    if "stock" in wanted:
        c.number("stock", "Stock", scale=KG_PER_TONNE, minimum=0, inclusive=True, attr=attrs["stock"])
    if "cost" in wanted:
        c.number("cost", "Cost", scale=CENTS_PER_UNIT, minimum=0, inclusive=False, attr=attrs["cost"])
    if "dealerName" in wanted:
        c.text("dealerName", "Dealer name", 2, attr=attrs["dealerName"])
    if "branch" in wanted:
        c.choice("branch", BRANCHES, "Valid branch is required (branch1 or branch2)", attr=attrs["branch"])
    if "contact" in wanted:
        c.contact("contact", attr=attrs["contact"])
    if "salePrice" in wanted:
        c.number("salePrice", "Sale price", scale=CENTS_PER_UNIT, minimum=0, inclusive=False, attr=attrs["salePrice"])
    c.raise_if_errors()
    return c.clean


def validate_sale(payload: Any) -> dict:
    c = _Collector(payload)
    c.text("produceName", "Produce name", 2, attr="produce_name")
    c.number("tonnage", "Tonnage", scale=KG_PER_TONNE, minimum=0, inclusive=False, attr="tonnage_kg")
    c.number("amountPaid", "Amount paid", scale=CENTS_PER_UNIT, minimum=0, inclusive=True, attr="amount_paid_cents")
    c.text("buyerName", "Buyer name", 2, attr="buyer_name")
    c.choice("branch", BRANCHES, "Valid branch is required")
    c.raise_if_errors()
    return c.clean


def validate_credit_sale(payload: Any, *, now: datetime | None = None) -> dict:
    c = _Collector(payload)
    c.text("buyerName", "Buyer name", 2, attr="buyer_name")
    c.text("nin", "NIN", 6)
    c.text("location", "Location", 3)
    c.contact("contact")
    c.number("amountDue", "Amount due", scale=CENTS_PER_UNIT, minimum=0, inclusive=False, attr="amount_due_cents")
    c.text("produceName", "Produce name", 1, attr="produce_name")
    c.number("tonnage", "Tonnage", scale=KG_PER_TONNE, minimum=0, inclusive=False, attr="tonnage_kg")
    c.choice("branch", BRANCHES, "Valid branch is required")

    raw_due = c.payload.get("dueDate")
    if not c.present("dueDate"):
        c.errors.append("Due date is required")
    else:
        try:
            due = parse_iso_datetime(str(raw_due))
        except ValueError:
            c.errors.append("Due date must be an ISO-8601 date")
        else:
            if due <= (now or utcnow()):
                c.errors.append("Due date must be in the future")
            else:
                c.clean["due_date"] = due
    c.raise_if_errors()
    return c.clean


def validate_status(payload: Any) -> str:
    status = payload.get("status") if isinstance(payload, dict) else None
    if status not in CREDIT_STATUSES:
        raise InvalidStatus(
            "Invalid status",
            details={"allowed": list(CREDIT_STATUSES)},
        )
    return status


def validate_branch_param(value: str | None) -> str | None:
    """Query-string branch: empty means unspecified, anything else must be a known branch."""
    if value is None or value == "":
        return None
    if value not in BRANCHES:
        raise ValidationError(["Valid branch is required (branch1 or branch2)"])
    return value
