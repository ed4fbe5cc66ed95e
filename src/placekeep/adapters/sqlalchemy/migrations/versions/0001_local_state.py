"""Pending mutation queue and place snapshots.

Revision ID: 0001_local_state
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_local_state"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "pending_mutation",
        sa.Column("sequence", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("temp_id", sa.String(length=64), nullable=False),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("place_json", sa.Text(), nullable=False),
        sa.Column("visited_on", sa.Date(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("text", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("sequence", name=op.f("pk_pending_mutation")),
        sa.UniqueConstraint("temp_id", name=op.f("uq_pending_mutation_temp_id")),
    )
    op.create_table(
        "mutation_attachment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("mutation_sequence", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("content_type", sa.String(length=128), nullable=True),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.ForeignKeyConstraint(
            ["mutation_sequence"],
            ["pending_mutation.sequence"],
            name=op.f("fk_mutation_attachment_mutation_sequence_pending_mutation"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_mutation_attachment")),
    )
    op.create_index(
        op.f("ix_mutation_attachment_mutation_sequence"),
        "mutation_attachment",
        ["mutation_sequence"],
        unique=False,
    )
    op.create_table(
        "place_snapshot",
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_place_snapshot")),
    )


def downgrade() -> None:
    op.drop_table("place_snapshot")
    op.drop_index(
        op.f("ix_mutation_attachment_mutation_sequence"), table_name="mutation_attachment"
    )
    op.drop_table("mutation_attachment")
    op.drop_table("pending_mutation")
