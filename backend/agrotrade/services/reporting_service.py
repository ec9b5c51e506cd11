"""
Read-only aggregation over sales, credit sales and produce.

Records are loaded with their filters applied in SQL and reduced in memory,
which is comfortably within reach for a two-branch operation. Money totals:
- revenue = regular amountPaid + credit amountDue with status 'paid'
- outstanding = credit amountDue with status 'pending' or 'overdue'

Sums are taken over integer cents and converted to currency units only when
the report is assembled.
"""

from __future__ import annotations

from datetime import datetime

from ..constants import BRANCHES, CREDIT_OVERDUE, CREDIT_PAID, CREDIT_PENDING
from ..errors import ValidationError
from ..extensions import db
from ..models import CreditSale, Produce, Sale, User
from ..time_utils import parse_range, to_utc_z
from ..units import CENTS_PER_UNIT, KG_PER_TONNE, cents_to_units
from .inventory_service import stock_bucket


def _parse_period(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    try:
        return parse_range(start, end)
    except ValueError:
        raise ValidationError(["startDate and endDate must be ISO-8601 dates"])


def _filtered(model, branch: str | None, start_dt: datetime | None, end_dt: datetime | None) -> list:
    query = db.session.query(model)
    if branch:
        query = query.filter(model.branch == branch)
    if start_dt:
        query = query.filter(model.created_at >= start_dt)
    if end_dt:
        query = query.filter(model.created_at <= end_dt)
    return query.order_by(model.created_at.desc(), model.id.desc()).all()


def _credit_totals(credit_sales: list[CreditSale]) -> dict:
    totals = {CREDIT_PAID: 0, CREDIT_PENDING: 0, CREDIT_OVERDUE: 0}
    for cs in credit_sales:
        totals[cs.status] = totals.get(cs.status, 0) + cs.amount_due_cents
    return totals


def _money_summary(sales: list[Sale], credit_sales: list[CreditSale]) -> dict:
    regular = sum(s.amount_paid_cents for s in sales)
    credit = _credit_totals(credit_sales)
    return {
        "totalRegularSales": cents_to_units(regular),
        "totalCreditSales": cents_to_units(sum(cs.amount_due_cents for cs in credit_sales)),
        "totalRevenue": cents_to_units(regular + credit[CREDIT_PAID]),
        "paidCreditSales": cents_to_units(credit[CREDIT_PAID]),
        "pendingCreditSales": cents_to_units(credit[CREDIT_PENDING]),
        "overdueCreditSales": cents_to_units(credit[CREDIT_OVERDUE]),
        "outstandingCredit": cents_to_units(credit[CREDIT_PENDING] + credit[CREDIT_OVERDUE]),
    }


def _transaction_counts(sales: list, credit_sales: list) -> dict:
    return {
        "regularSalesCount": len(sales),
        "creditSalesCount": len(credit_sales),
        "totalTransactions": len(sales) + len(credit_sales),
    }


def _empty_group() -> dict:
    return {"count": 0, "total": 0, "creditCount": 0, "creditTotal": 0}


def _group_in_units(group: dict) -> dict:
    return {
        **group,
        "total": cents_to_units(group["total"]),
        "creditTotal": cents_to_units(group["creditTotal"]),
    }


def sales_summary(*, branch: str | None, start: str | None, end: str | None) -> dict:
    start_dt, end_dt = _parse_period(start, end)
    sales = _filtered(Sale, branch, start_dt, end_dt)
    credit_sales = _filtered(CreditSale, branch, start_dt, end_dt)

    by_branch = {b: _empty_group() for b in ([branch] if branch else BRANCHES)}
    by_agent: dict[int, dict] = {}

    def _agent_group(record) -> dict:
        group = by_agent.get(record.sales_agent_id)
        if group is None:
            group = {"agentId": record.sales_agent_id, "name": record.sales_agent_name, **_empty_group()}
            by_agent[record.sales_agent_id] = group
        return group

    for sale in sales:
        by_branch.setdefault(sale.branch, _empty_group())
        by_branch[sale.branch]["count"] += 1
        by_branch[sale.branch]["total"] += sale.amount_paid_cents
        group = _agent_group(sale)
        group["count"] += 1
        group["total"] += sale.amount_paid_cents

    for cs in credit_sales:
        by_branch.setdefault(cs.branch, _empty_group())
        by_branch[cs.branch]["creditCount"] += 1
        by_branch[cs.branch]["creditTotal"] += cs.amount_due_cents
        group = _agent_group(cs)
        group["creditCount"] += 1
        group["creditTotal"] += cs.amount_due_cents

    ranked = sorted(by_agent.values(), key=lambda g: g["total"] + g["creditTotal"], reverse=True)
    return {
        "branch": branch or "all",
        "startDate": to_utc_z(start_dt),
        "endDate": to_utc_z(end_dt),
        "summary": _money_summary(sales, credit_sales),
        "salesByBranch": {b: _group_in_units(g) for b, g in by_branch.items()},
        "salesByAgent": [_group_in_units(g) for g in ranked],
        **_transaction_counts(sales, credit_sales),
    }


def _inventory_counts(produce: list[Produce]) -> dict:
    counts = {"totalItems": len(produce), "outOfStock": 0, "lowStock": 0, "adequateStock": 0}
    for item in produce:
        counts[stock_bucket(item.stock_kg)] += 1
    return counts


def branch_report(*, branch: str | None, start: str | None = None, end: str | None = None) -> dict:
    start_dt, end_dt = _parse_period(start, end)
    sales = _filtered(Sale, branch, start_dt, end_dt)
    credit_sales = _filtered(CreditSale, branch, start_dt, end_dt)
    produce = _filtered(Produce, branch, None, None)

    money = _money_summary(sales, credit_sales)
    return {
        "branch": branch or "all",
        "startDate": to_utc_z(start_dt),
        "endDate": to_utc_z(end_dt),
        "summary": {
            "totalRegularSales": money["totalRegularSales"],
            "totalCreditSales": money["totalCreditSales"],
            "totalRevenue": money["totalRevenue"],
            "pendingCredit": money["pendingCreditSales"],
            "overdueCredit": money["overdueCreditSales"],
            "outstandingCredit": money["outstandingCredit"],
        },
        "inventory": _inventory_counts(produce),
        "transactions": _transaction_counts(sales, credit_sales),
    }


def _stock_value(raw: int) -> float:
    # raw is kg * cents-per-tonne
    return raw / (KG_PER_TONNE * CENTS_PER_UNIT)


def inventory_report(*, branch: str | None) -> dict:
    query = db.session.query(Produce)
    if branch:
        query = query.filter(Produce.branch == branch)
    produce = query.order_by(Produce.name.asc(), Produce.id.asc()).all()

    items = {"outOfStock": [], "lowStock": [], "adequateStock": []}
    values = {"outOfStock": 0, "lowStock": 0, "adequateStock": 0}
    for item in produce:
        bucket = stock_bucket(item.stock_kg)
        items[bucket].append(item.to_dict())
        values[bucket] += item.stock_kg * item.cost_cents

    return {
        "branch": branch or "all",
        "summary": {
            "totalItems": len(produce),
            "outOfStock": len(items["outOfStock"]),
            "lowStock": len(items["lowStock"]),
            "adequateStock": len(items["adequateStock"]),
            "totalValue": _stock_value(sum(values.values())),
            "outOfStockValue": _stock_value(values["outOfStock"]),
            "lowStockValue": _stock_value(values["lowStock"]),
            "adequateStockValue": _stock_value(values["adequateStock"]),
        },
        "items": items,
    }


def agent_performance(*, branch: str | None, start: str | None, end: str | None) -> dict:
    start_dt, end_dt = _parse_period(start, end)
    sales = _filtered(Sale, branch, start_dt, end_dt)
    credit_sales = _filtered(CreditSale, branch, start_dt, end_dt)

    agent_ids = {r.sales_agent_id for r in sales} | {r.sales_agent_id for r in credit_sales}
    emails = {}
    if agent_ids:
        emails = dict(db.session.query(User.id, User.email).filter(User.id.in_(agent_ids)).all())

    performance: dict[int, dict] = {}

    def _row(record) -> dict:
        row = performance.get(record.sales_agent_id)
        if row is None:
            row = {
                "agentId": record.sales_agent_id,
                "name": record.sales_agent_name,
                "email": emails.get(record.sales_agent_id),
                "regularSalesCount": 0,
                "regularSalesTotal": 0,
                "creditSalesCount": 0,
                "creditSalesTotal": 0,
            }
            performance[record.sales_agent_id] = row
        return row

    for sale in sales:
        row = _row(sale)
        row["regularSalesCount"] += 1
        row["regularSalesTotal"] += sale.amount_paid_cents

    for cs in credit_sales:
        row = _row(cs)
        row["creditSalesCount"] += 1
        row["creditSalesTotal"] += cs.amount_due_cents

    ranked = sorted(
        performance.values(),
        key=lambda r: r["regularSalesTotal"] + r["creditSalesTotal"],
        reverse=True,
    )
    rows = []
    for row in ranked:
        total = row["regularSalesTotal"] + row["creditSalesTotal"]
        row["regularSalesTotal"] = cents_to_units(row["regularSalesTotal"])
        row["creditSalesTotal"] = cents_to_units(row["creditSalesTotal"])
        row["totalSales"] = cents_to_units(total)
        row["totalTransactions"] = row["regularSalesCount"] + row["creditSalesCount"]
        rows.append(row)

    return {
        "branch": branch or "all",
        "startDate": to_utc_z(start_dt),
        "endDate": to_utc_z(end_dt),
        "count": len(rows),
        "performance": rows,
    }
