"""add users companies employees invitations

Revision ID: 3b7e2f0c9a11
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b7e2f0c9a11"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "companies",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("country", sa.String(), nullable=False),
        sa.Column("county", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("street", sa.String(), nullable=False),
        sa.Column("postal_code", sa.String(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("created_by_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )
    op.create_index("ix_companies_created_by_id", "companies", ["created_by_id"], unique=False)
    op.create_index("ix_companies_deleted_at", "companies", ["deleted_at"], unique=False)

    op.create_table(
        "company_employees",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("employee_id", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"]),
        sa.UniqueConstraint("company_id", "employee_id", name="uq_company_employees_company_employee"),
        sa.CheckConstraint("role in ('OWNER','MANAGER','REGULAR')", name="ck_company_employees_role_valid"),
    )
    op.create_index("ix_company_employees_company_id", "company_employees", ["company_id"], unique=False)
    op.create_index("ix_company_employees_employee_id", "company_employees", ["employee_id"], unique=False)

    op.create_table(
        "company_employee_invitations",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("sender_id", sa.String(), nullable=False),
        sa.Column("invited_user_id", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["sender_id"], ["company_employees.id"]),
        sa.ForeignKeyConstraint(["invited_user_id"], ["users.id"]),
        sa.CheckConstraint(
            "status in ('PENDING','ACCEPTED','DECLINED','CANCELLED','EXPIRED')",
            name="ck_company_employee_invitations_status_valid",
        ),
        sa.CheckConstraint(
            "role in ('OWNER','MANAGER','REGULAR')",
            name="ck_company_employee_invitations_role_valid",
        ),
    )
    op.create_index(
        "ix_company_employee_invitations_sender_id", "company_employee_invitations", ["sender_id"], unique=False
    )
    op.create_index(
        "ix_company_employee_invitations_invited_user_id",
        "company_employee_invitations",
        ["invited_user_id"],
        unique=False,
    )
    op.create_index(
        "ix_company_employee_invitations_status", "company_employee_invitations", ["status"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_company_employee_invitations_status", table_name="company_employee_invitations")
    op.drop_index("ix_company_employee_invitations_invited_user_id", table_name="company_employee_invitations")
    op.drop_index("ix_company_employee_invitations_sender_id", table_name="company_employee_invitations")
    op.drop_table("company_employee_invitations")

    op.drop_index("ix_company_employees_employee_id", table_name="company_employees")
    op.drop_index("ix_company_employees_company_id", table_name="company_employees")
    op.drop_table("company_employees")

    op.drop_index("ix_companies_deleted_at", table_name="companies")
    op.drop_index("ix_companies_created_by_id", table_name="companies")
    op.drop_table("companies")

    op.drop_table("users")
