"""
Sales Service - stock-consistent recording of regular sales

WHY: A sale and the stock it consumes must never disagree. The stock
decrement is a conditional UPDATE in the same database transaction as the
sale row; if writing the sale fails, rolling the transaction back restores
the stock, so stock can never vanish without a matching record.

Credit sales reuse record_stock_movement (see credit_service).
"""

from __future__ import annotations

from typing import Callable

from flask import current_app

from ..constants import SALE_TYPE_REGULAR
from ..errors import InsufficientStock, NotFound, ServiceError
from ..extensions import db
from ..models import Produce, Sale
from ..units import cents_to_units
from . import inventory_service
from .concurrency import run_with_retry


def _persist(record) -> None:
    db.session.add(record)
    db.session.flush()


def record_stock_movement(
    *,
    produce_name: str,
    branch: str,
    tonnage_kg: int,
    build_record: Callable[[Produce], object],
):
    """
    Check-and-decrement a produce lot and persist the transaction record.

    1. Locate the lot by (name, branch)              -> NotFound
    2. Compare tonnage_kg with the lot's stock       -> InsufficientStock
    3. Conditionally decrement stock in the database -> InsufficientStock if
       another writer got there first
    4. Build the record (denormalizing names) and flush it
    5. Commit both together

    Returns (record, remaining_stock_kg).
    """
    def _op():
        try:
            lot = inventory_service.find_lot(produce_name, branch, tonnage_kg)
            if lot.stock_kg < tonnage_kg:
                raise InsufficientStock(available_kg=lot.stock_kg, requested_kg=tonnage_kg)

            if not inventory_service.reserve_stock(lot.id, tonnage_kg):
                db.session.rollback()
                raise InsufficientStock(
                    available_kg=inventory_service.current_stock(lot.id),
                    requested_kg=tonnage_kg,
                )
        except ServiceError:
            db.session.rollback()
            raise

        # Reload inside the same transaction so the value is our own decrement
        db.session.refresh(lot)
        remaining = lot.stock_kg

        record = build_record(lot)
        try:
            _persist(record)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.error(
                "Rolled back stock reservation of %s kg on produce id=%s after record write failed",
                tonnage_kg, lot.id,
            )
            raise
        return record, remaining

    return run_with_retry(_op)


def record_sale(*, agent, fields: dict) -> tuple[Sale, int]:
    def _build(lot: Produce) -> Sale:
        return Sale(
            produce_id=lot.id,
            produce_name=lot.name,
            tonnage_kg=fields["tonnage_kg"],
            amount_paid_cents=fields["amount_paid_cents"],
            buyer_name=fields["buyer_name"],
            sales_agent_id=agent.id,
            sales_agent_name=agent.name,
            branch=lot.branch,
            sale_type=SALE_TYPE_REGULAR,
        )

    sale, remaining = record_stock_movement(
        produce_name=fields["produce_name"],
        branch=fields["branch"],
        tonnage_kg=fields["tonnage_kg"],
        build_record=_build,
    )
    current_app.logger.info(
        "Sale recorded id=%s produce=%s tonnage_kg=%s remaining_kg=%s agent=%s",
        sale.id, sale.produce_id, sale.tonnage_kg, remaining, agent.id,
    )
    return sale, remaining


def list_sales(*, branch: str | None = None, sale_type: str | None = None, agent_id: int | None = None) -> list[Sale]:
    query = db.session.query(Sale)
    if branch:
        query = query.filter(Sale.branch == branch)
    if sale_type:
        query = query.filter(Sale.sale_type == sale_type)
    if agent_id is not None:
        query = query.filter(Sale.sales_agent_id == agent_id)
    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise NotFound("Sale not found")
    return sale


def total_paid(sales: list[Sale]) -> float:
    return cents_to_units(sum(sale.amount_paid_cents for sale in sales))
