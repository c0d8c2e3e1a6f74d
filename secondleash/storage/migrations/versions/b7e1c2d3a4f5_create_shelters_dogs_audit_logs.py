"""create shelters, dogs and audit logs

Revision ID: b7e1c2d3a4f5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7e1c2d3a4f5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create tenant, record and audit tables."""
    op.create_table(
        "shelters",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("address_line", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("city", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("region", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("country", sqlmodel.sql.sqltypes.AutoString(length=2), nullable=True),
        sa.Column("phone", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "dogs",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("shelter_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("sex", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("approx_birthdate", sa.DateTime(), nullable=True),
        sa.Column("breed", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column("size", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("weight_kg", sa.Numeric(5, 2, asdecimal=False), nullable=True),
        sa.Column("microchip_id", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column("intake_date", sa.DateTime(), nullable=True),
        sa.Column(
            "status",
            sqlmodel.sql.sqltypes.AutoString(),
            nullable=False,
            server_default="AVAILABLE",
        ),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["shelter_id"], ["shelters.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_dogs_shelter_id"), "dogs", ["shelter_id"])
    op.create_index(op.f("ix_dogs_status"), "dogs", ["status"])
    op.create_index("ix_dogs_shelter_live", "dogs", ["shelter_id", "deleted_at"])
    # Microchip ids are unique across all shelters, among live dogs only
    op.create_index(
        "uq_dogs_microchip_id_live",
        "dogs",
        ["microchip_id"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("shelter_id", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column(
            "user_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default=""
        ),
        sa.Column("action", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column(
            "resource_type",
            sqlmodel.sql.sqltypes.AutoString(),
            nullable=False,
            server_default="",
        ),
        sa.Column(
            "resource_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default=""
        ),
        sa.Column(
            "details_json",
            sqlmodel.sql.sqltypes.AutoString(),
            nullable=False,
            server_default="{}",
        ),
        sa.Column(
            "ip_address", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default=""
        ),
        sa.Column(
            "request_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False, server_default=""
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_shelter_id"), "audit_logs", ["shelter_id"])
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"])


def downgrade() -> None:
    """Drop all tables created by this revision."""
    op.drop_index(op.f("ix_audit_logs_action"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_shelter_id"), table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("uq_dogs_microchip_id_live", table_name="dogs")
    op.drop_index("ix_dogs_shelter_live", table_name="dogs")
    op.drop_index(op.f("ix_dogs_status"), table_name="dogs")
    op.drop_index(op.f("ix_dogs_shelter_id"), table_name="dogs")
    op.drop_table("dogs")
    op.drop_table("shelters")
