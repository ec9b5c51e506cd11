from __future__ import annotations

from ..constants import CREDIT_PENDING, SALE_TYPE_CREDIT, SALE_TYPE_REGULAR
from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..units import cents_to_units, kg_to_tonnes


class Sale(db.Model):
    """
    Immediate-payment sale. Append-only.

    produce_name and sales_agent_name are copied at write time; the foreign
    keys are links for joins only and never used to replay current values.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_branch_created", "branch", "created_at"),
        db.Index("ix_sales_agent_created", "sales_agent_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    produce_id = db.Column(db.Integer, db.ForeignKey("produce.id"), nullable=False, index=True)
    produce_name = db.Column(db.String(120), nullable=False)

    tonnage_kg = db.Column(db.Integer, nullable=False)
    amount_paid_cents = db.Column(db.Integer, nullable=False)
    buyer_name = db.Column(db.String(120), nullable=False)

    sales_agent_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    sales_agent_name = db.Column(db.String(120), nullable=False)

    branch = db.Column(db.String(16), nullable=False)
    sale_type = db.Column(db.String(16), nullable=False, default=SALE_TYPE_REGULAR)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "produce": self.produce_id,
            "produceName": self.produce_name,
            "tonnage": kg_to_tonnes(self.tonnage_kg),
            "amountPaid": cents_to_units(self.amount_paid_cents),
            "buyerName": self.buyer_name,
            "salesAgent": self.sales_agent_id,
            "salesAgentName": self.sales_agent_name,
            "branch": self.branch,
            "saleType": self.sale_type,
            "createdAt": to_utc_z(self.created_at),
        }


class CreditSale(db.Model):
    """
    Deferred-payment sale. Only `status` changes after creation.

    Nothing moves a record to 'overdue' on its own; overdue alerts are
    computed from due_date at query time.
    """
    __tablename__ = "credit_sales"
    __table_args__ = (
        db.Index("ix_credit_sales_branch_status_created", "branch", "status", "created_at"),
        db.Index("ix_credit_sales_agent_created", "sales_agent_id", "created_at"),
        db.Index("ix_credit_sales_due_date", "due_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    buyer_name = db.Column(db.String(120), nullable=False)
    nin = db.Column(db.String(32), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    contact = db.Column(db.String(15), nullable=False)

    amount_due_cents = db.Column(db.Integer, nullable=False)

    produce_id = db.Column(db.Integer, db.ForeignKey("produce.id"), nullable=False, index=True)
    produce_name = db.Column(db.String(120), nullable=False)
    tonnage_kg = db.Column(db.Integer, nullable=False)

    sales_agent_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    sales_agent_name = db.Column(db.String(120), nullable=False)

    due_date = db.Column(db.DateTime, nullable=False)
    dispatch_date = db.Column(db.DateTime, nullable=False, default=utcnow)

    branch = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=CREDIT_PENDING)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "buyerName": self.buyer_name,
            "nin": self.nin,
            "location": self.location,
            "contact": self.contact,
            "amountDue": cents_to_units(self.amount_due_cents),
            "produce": self.produce_id,
            "produceName": self.produce_name,
            "tonnage": kg_to_tonnes(self.tonnage_kg),
            "salesAgent": self.sales_agent_id,
            "salesAgentName": self.sales_agent_name,
            "dueDate": to_utc_z(self.due_date),
            "dispatchDate": to_utc_z(self.dispatch_date),
            "branch": self.branch,
            "status": self.status,
            "saleType": SALE_TYPE_CREDIT,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
