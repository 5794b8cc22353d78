"""add resources availability and employee assignments

Revision ID: 8d41c6a2e5f0
Revises: 3b7e2f0c9a11
Create Date: 2026-10-18 11:47:03.552917

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8d41c6a2e5f0"
down_revision: Union[str, Sequence[str], None] = "3b7e2f0c9a11"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "resources",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("requires_booking_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.CheckConstraint(
            "category in ('BEAUTY','HEALTH','SPORTS','EDUCATION','ENTERTAINMENT','OTHER')",
            name="ck_resources_category_valid",
        ),
    )
    op.create_index("ix_resources_company_id", "resources", ["company_id"], unique=False)

    op.create_table(
        "resource_availabilities",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("resource_id", sa.String(), nullable=False),
        sa.Column("day_of_week", sa.String(), nullable=False),
        sa.Column("start_time", sa.String(), nullable=False),
        sa.Column("end_time", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("resource_id", "day_of_week", name="uq_resource_availabilities_resource_day"),
        sa.CheckConstraint(
            "day_of_week in ('MONDAY','TUESDAY','WEDNESDAY','THURSDAY','FRIDAY','SATURDAY','SUNDAY')",
            name="ck_resource_availabilities_day_valid",
        ),
    )
    op.create_index("ix_resource_availabilities_resource_id", "resource_availabilities", ["resource_id"], unique=False)

    op.create_table(
        "resource_employees",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("resource_id", sa.String(), nullable=False),
        sa.Column("employee_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["company_employees.id"]),
        sa.UniqueConstraint("resource_id", "employee_id", name="uq_resource_employees_resource_employee"),
    )
    op.create_index("ix_resource_employees_resource_id", "resource_employees", ["resource_id"], unique=False)
    op.create_index("ix_resource_employees_employee_id", "resource_employees", ["employee_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_resource_employees_employee_id", table_name="resource_employees")
    op.drop_index("ix_resource_employees_resource_id", table_name="resource_employees")
    op.drop_table("resource_employees")

    op.drop_index("ix_resource_availabilities_resource_id", table_name="resource_availabilities")
    op.drop_table("resource_availabilities")

    op.drop_index("ix_resources_company_id", table_name="resources")
    op.drop_table("resources")
