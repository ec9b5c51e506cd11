"""
Inventory Ledger invariants (authoritative)

- Produce.stock_kg is a stored, mutable tonnage in whole kilograms; it is
  never negative.
- Procurement creates a new Produce lot; it never merges into an existing lot.
- Sales and credit sales decrease stock_kg only through reserve_stock, which is a
  single conditional UPDATE ("decrement by T only if stock >= T"). A
  read-modify-write of stock anywhere else is a bug.
- Updates through the API never touch stock or branch.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..constants import LOW_STOCK_THRESHOLD
from ..errors import NotFound
from ..extensions import db
from ..models import Produce
from ..time_utils import utcnow
from ..units import KG_PER_TONNE


def record_procurement(*, recorded_by, fields: dict) -> Produce:
    """Persist a validated procurement as a new lot."""
    now = utcnow()
    produce = Produce(recorded_by_id=recorded_by.id, created_at=now, updated_at=now, **fields)
    db.session.add(produce)
    db.session.commit()
    current_app.logger.info(
        "Procurement recorded id=%s name=%s branch=%s stock_kg=%s by user=%s",
        produce.id, produce.name, produce.branch, produce.stock_kg, recorded_by.id,
    )
    return produce


def list_produce(branch: str | None = None) -> list[Produce]:
    query = db.session.query(Produce)
    if branch:
        query = query.filter(Produce.branch == branch)
    return query.order_by(Produce.created_at.desc(), Produce.id.desc()).all()


def get_produce(produce_id: int) -> Produce:
    produce = db.session.get(Produce, produce_id)
    if not produce:
        raise NotFound("Produce not found")
    return produce


def update_produce(produce: Produce, patch: dict) -> Produce:
    """Apply a validated partial update. Only the patched columns are written."""
    for attr, value in patch.items():
        setattr(produce, attr, value)
    produce.updated_at = utcnow()
    db.session.commit()
    current_app.logger.info("Produce updated id=%s fields=%s", produce.id, sorted(patch))
    return produce


def out_of_stock(branch: str | None = None) -> list[Produce]:
    query = db.session.query(Produce).filter(Produce.stock_kg <= 0)
    if branch:
        query = query.filter(Produce.branch == branch)
    return query.order_by(Produce.created_at.desc(), Produce.id.desc()).all()


def stock_bucket(stock_kg: int) -> str:
    if stock_kg <= 0:
        return "outOfStock"
    if stock_kg < LOW_STOCK_THRESHOLD * KG_PER_TONNE:
        return "lowStock"
    return "adequateStock"


def find_lot(name: str, branch: str, tonnage_kg: int) -> Produce:
    """
    Resolve a produce name within a branch to one lot.

    Names are not unique across lots. Lots are taken oldest first and the
    first one that covers the request wins; when none does, the oldest lot
    is returned so the caller can report its stock.
    """
    lots = (
        db.session.query(Produce)
        .filter(Produce.name == name, Produce.branch == branch)
        .order_by(Produce.created_at.asc(), Produce.id.asc())
        .populate_existing()
        .all()
    )
    if not lots:
        raise NotFound(f'Produce "{name}" not found in {branch}')
    for lot in lots:
        if lot.stock_kg >= tonnage_kg:
            return lot
    return lots[0]


def reserve_stock(produce_id: int, tonnage_kg: int) -> bool:
    """
    Atomically decrement stock_kg by tonnage_kg if enough is on hand.

    Runs inside the caller's transaction and does not commit. Returns False
    when the row no longer has enough stock at statement time.
    """
    result = db.session.execute(
        update(Produce)
        .where(Produce.id == produce_id, Produce.stock_kg >= tonnage_kg)
        .values(stock_kg=Produce.stock_kg - tonnage_kg, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def current_stock(produce_id: int) -> int:
    stock_kg = db.session.query(Produce.stock_kg).filter(Produce.id == produce_id).scalar()
    return stock_kg if stock_kg is not None else 0
