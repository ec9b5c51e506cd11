"""Initial schema: users, produce, sales, credit sales

Revision ID: 20261016_initial
Revises:
Create Date: 2026-10-16
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261016_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("branch", sa.String(16), nullable=False),
        sa.Column("contact", sa.String(15), nullable=False),
        sa.Column("photo", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_branch_role", "users", ["branch", "role"])

    op.create_table(
        "produce",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("type", sa.String(120), nullable=False),
        sa.Column("stock_kg", sa.Integer(), nullable=False),
        sa.Column("cost_cents", sa.Integer(), nullable=False),
        sa.Column("sale_price_cents", sa.Integer(), nullable=False),
        sa.Column("dealer_name", sa.String(120), nullable=False),
        sa.Column("contact", sa.String(15), nullable=False),
        sa.Column("branch", sa.String(16), nullable=False),
        sa.Column("recorded_by_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("stock_kg >= 0", name="ck_produce_stock_non_negative"),
        sa.ForeignKeyConstraint(["recorded_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_produce_branch_created", "produce", ["branch", "created_at"])
    op.create_index("ix_produce_name_branch", "produce", ["name", "branch"])
    op.create_index("ix_produce_recorded_by_id", "produce", ["recorded_by_id"])

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("produce_id", sa.Integer(), nullable=False),
        sa.Column("produce_name", sa.String(120), nullable=False),
        sa.Column("tonnage_kg", sa.Integer(), nullable=False),
        sa.Column("amount_paid_cents", sa.Integer(), nullable=False),
        sa.Column("buyer_name", sa.String(120), nullable=False),
        sa.Column("sales_agent_id", sa.Integer(), nullable=False),
        sa.Column("sales_agent_name", sa.String(120), nullable=False),
        sa.Column("branch", sa.String(16), nullable=False),
        sa.Column("sale_type", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["produce_id"], ["produce.id"]),
        sa.ForeignKeyConstraint(["sales_agent_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sales_branch_created", "sales", ["branch", "created_at"])
    op.create_index("ix_sales_agent_created", "sales", ["sales_agent_id", "created_at"])
    op.create_index("ix_sales_produce_id", "sales", ["produce_id"])

    op.create_table(
        "credit_sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("buyer_name", sa.String(120), nullable=False),
        sa.Column("nin", sa.String(32), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("contact", sa.String(15), nullable=False),
        sa.Column("amount_due_cents", sa.Integer(), nullable=False),
        sa.Column("produce_id", sa.Integer(), nullable=False),
        sa.Column("produce_name", sa.String(120), nullable=False),
        sa.Column("tonnage_kg", sa.Integer(), nullable=False),
        sa.Column("sales_agent_id", sa.Integer(), nullable=False),
        sa.Column("sales_agent_name", sa.String(120), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("dispatch_date", sa.DateTime(), nullable=False),
        sa.Column("branch", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["produce_id"], ["produce.id"]),
        sa.ForeignKeyConstraint(["sales_agent_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_credit_sales_branch_status_created", "credit_sales", ["branch", "status", "created_at"])
    op.create_index("ix_credit_sales_agent_created", "credit_sales", ["sales_agent_id", "created_at"])
    op.create_index("ix_credit_sales_due_date", "credit_sales", ["due_date"])
    op.create_index("ix_credit_sales_produce_id", "credit_sales", ["produce_id"])


def downgrade():
    op.drop_table("credit_sales")
    op.drop_table("sales")
    op.drop_table("produce")
    op.drop_table("users")
