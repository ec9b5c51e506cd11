"""Credit sales: recording, status changes and overdue alerts."""

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..constants import CREDIT_OVERDUE, CREDIT_PENDING
from ..errors import NotFound
from ..extensions import db
from ..models import CreditSale, Produce
from ..time_utils import utcnow
from ..units import cents_to_units
from .sales_service import record_stock_movement


def record_credit_sale(*, agent, fields: dict) -> tuple[CreditSale, int]:
    def _build(lot: Produce) -> CreditSale:
        return CreditSale(
            buyer_name=fields["buyer_name"],
            nin=fields["nin"],
            location=fields["location"],
            contact=fields["contact"],
            amount_due_cents=fields["amount_due_cents"],
            produce_id=lot.id,
            produce_name=lot.name,
            tonnage_kg=fields["tonnage_kg"],
            sales_agent_id=agent.id,
            sales_agent_name=agent.name,
            due_date=fields["due_date"],
            dispatch_date=utcnow(),
            branch=lot.branch,
            status=CREDIT_PENDING,
        )

    credit_sale, remaining = record_stock_movement(
        produce_name=fields["produce_name"],
        branch=fields["branch"],
        tonnage_kg=fields["tonnage_kg"],
        build_record=_build,
    )
    current_app.logger.info(
        "Credit sale recorded id=%s produce=%s tonnage_kg=%s due=%s remaining_kg=%s agent=%s",
        credit_sale.id, credit_sale.produce_id, credit_sale.tonnage_kg,
        credit_sale.due_date.isoformat(), remaining, agent.id,
    )
    return credit_sale, remaining


def list_credit_sales(
    *,
    branch: str | None = None,
    status: str | None = None,
    agent_id: int | None = None,
) -> list[CreditSale]:
    query = db.session.query(CreditSale)
    if branch:
        query = query.filter(CreditSale.branch == branch)
    if status:
        query = query.filter(CreditSale.status == status)
    if agent_id is not None:
        query = query.filter(CreditSale.sales_agent_id == agent_id)
    return query.order_by(CreditSale.created_at.desc(), CreditSale.id.desc()).all()


def get_credit_sale(credit_sale_id: int) -> CreditSale:
    credit_sale = db.session.get(CreditSale, credit_sale_id)
    if not credit_sale:
        raise NotFound("Credit sale not found")
    return credit_sale


def update_status(credit_sale: CreditSale, status: str, *, actor_id: int) -> CreditSale:
    """Unconditional status change; any of the three states may follow any other."""
    previous = credit_sale.status
    credit_sale.status = status
    credit_sale.updated_at = utcnow()
    db.session.commit()
    current_app.logger.info(
        "Credit sale id=%s status %s -> %s by user=%s", credit_sale.id, previous, status, actor_id,
    )
    return credit_sale


def overdue_credit_sales(*, branch: str | None = None, now: datetime | None = None) -> list[CreditSale]:
    """
    Unpaid credit sales whose due date has passed.

    Computed on read: a record can be overdue here while its stored status
    still says 'pending'.
    """
    query = db.session.query(CreditSale).filter(
        CreditSale.status.in_([CREDIT_PENDING, CREDIT_OVERDUE]),
        CreditSale.due_date < (now or utcnow()),
    )
    if branch:
        query = query.filter(CreditSale.branch == branch)
    return query.order_by(CreditSale.due_date.asc(), CreditSale.id.asc()).all()


def sum_due(credit_sales: list[CreditSale], status: str | None = None) -> float:
    return cents_to_units(
        sum(cs.amount_due_cents for cs in credit_sales if status is None or cs.status == status)
    )
