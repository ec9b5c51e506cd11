from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..units import cents_to_units, kg_to_tonnes


class Produce(db.Model):
    """
    One procurement lot of produce held by a branch.

    Every procurement event creates a new lot; lots are never merged by name.
    `stock_kg` is the only field that sales mutate, and only through the
    conditional decrement in inventory_service.reserve_stock.
    """
    __tablename__ = "produce"
    __table_args__ = (
        db.CheckConstraint("stock_kg >= 0", name="ck_produce_stock_non_negative"),
        db.Index("ix_produce_branch_created", "branch", "created_at"),
        db.Index("ix_produce_name_branch", "name", "branch"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(120), nullable=False)

    # Tonnage on hand, in kilograms
    stock_kg = db.Column(db.Integer, nullable=False, default=0)

    # Per tonne, in cents
    cost_cents = db.Column(db.Integer, nullable=False)
    sale_price_cents = db.Column(db.Integer, nullable=False)

    dealer_name = db.Column(db.String(120), nullable=False)
    contact = db.Column(db.String(15), nullable=False)

    branch = db.Column(db.String(16), nullable=False)
    recorded_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    recorded_by = db.relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Produce id={self.id} name={self.name!r} branch={self.branch} stock_kg={self.stock_kg}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "stock": kg_to_tonnes(self.stock_kg),
            "cost": cents_to_units(self.cost_cents),
            "salePrice": cents_to_units(self.sale_price_cents),
            "dealerName": self.dealer_name,
            "contact": self.contact,
            "branch": self.branch,
            "recordedBy": self.recorded_by.to_ref() if self.recorded_by else self.recorded_by_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
