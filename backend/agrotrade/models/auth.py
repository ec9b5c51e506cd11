from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    Staff account with a role and a branch assignment.

    Email is unique across the whole company and stored lower-cased, so the
    uniqueness constraint is effectively case-insensitive.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.Index("ix_users_branch_role", "branch", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password; never serialized
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False)
    branch = db.Column(db.String(16), nullable=False)
    contact = db.Column(db.String(15), nullable=False)
    photo = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_ref(self) -> dict:
        """Short form used where another record links to this user."""
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "branch": self.branch,
            "contact": self.contact,
            "photo": self.photo,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
