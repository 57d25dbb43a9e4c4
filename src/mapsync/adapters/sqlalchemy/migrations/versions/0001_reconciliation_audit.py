"""Create the reconciliation audit table.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "reconciliation_audit",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("map_set_code", sa.String(), nullable=False),
        sa.Column("source_code", sa.String(), nullable=False),
        sa.Column("branch", sa.String(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "SUCCESS",
                "UNCHANGED",
                "FAILED",
                name="reconciliationstatus",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("created", sa.Integer(), nullable=False),
        sa.Column("deleted", sa.Integer(), nullable=False),
        sa.Column("inactivated", sa.Integer(), nullable=False),
        sa.Column("reactivated", sa.Integer(), nullable=False),
        sa.Column("updated", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_reconciliation_audit")),
    )
    op.create_index(
        "ix_reconciliation_audit_map_set_code_source_code",
        "reconciliation_audit",
        ["map_set_code", "source_code"],
    )
    op.create_index(
        "ix_reconciliation_audit_recorded_at",
        "reconciliation_audit",
        ["recorded_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_reconciliation_audit_recorded_at", table_name="reconciliation_audit")
    op.drop_index(
        "ix_reconciliation_audit_map_set_code_source_code",
        table_name="reconciliation_audit",
    )
    op.drop_table("reconciliation_audit")
