"""Create product and product_stage tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
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
        "product",
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("origin", sa.String(), nullable=False),
        sa.Column("manufacturer", sa.String(), nullable=False),
        sa.Column("certification_hash", sa.String(), nullable=False),
        sa.Column("blockchain_ref_hash", sa.String(), nullable=False),
        sa.Column("created_by_wallet", sa.String(), nullable=True),
        sa.Column("cert_file", sa.String(), nullable=True),
        sa.Column("image_file", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("product_id", name="pk_product"),
    )
    op.create_index("ix_product_certification_hash", "product", ["certification_hash"])
    op.create_index("ix_product_blockchain_ref_hash", "product", ["blockchain_ref_hash"])

    op.create_table(
        "product_stage",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["product.product_id"],
            name="fk_product_stage_product_id_product",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("seq", name="pk_product_stage"),
    )
    op.create_index("ix_product_stage_product_id_seq", "product_stage", ["product_id", "seq"])


def downgrade() -> None:
    op.drop_index("ix_product_stage_product_id_seq", table_name="product_stage")
    op.drop_table("product_stage")
    op.drop_index("ix_product_blockchain_ref_hash", table_name="product")
    op.drop_index("ix_product_certification_hash", table_name="product")
    op.drop_table("product")
