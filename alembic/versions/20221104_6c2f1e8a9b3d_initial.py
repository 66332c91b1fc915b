"""initial

Revision ID: 6c2f1e8a9b3d
Revises:
Create Date: 2022-11-04 14:12:37.513840

"""
from alembic import op
import sqlalchemy as sa

from xscan.config import CONFIG as C

# revision identifiers, used by Alembic.
revision = "6c2f1e8a9b3d"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = C["DB_SCHEMA"]


def upgrade() -> None:
    if SCHEMA:
        op.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")

    op.create_table(
        "processed_block",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("blockNumber", sa.BigInteger(), nullable=False),
        sa.Column("processedAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("blockNumber"),
        sa.UniqueConstraint("id"),
        schema=SCHEMA,
    )
    op.create_table(
        "token",
        sa.Column("address", sa.String(length=42), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("symbol", sa.String(length=64), nullable=False),
        sa.Column("decimals", sa.SmallInteger(), nullable=False),
        sa.Column("creationTx", sa.String(length=66), nullable=False),
        sa.Column("creator", sa.String(length=42), nullable=False),
        sa.Column("isSonicXToken", sa.Boolean(), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("address"),
        sa.UniqueConstraint("id"),
        schema=SCHEMA,
    )
    op.create_table(
        "transaction",
        sa.Column("hash", sa.String(length=66), nullable=False),
        sa.Column("blockNumber", sa.BigInteger(), nullable=False),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("from", sa.String(length=42), nullable=False),
        sa.Column("to", sa.String(length=42), nullable=False),
        sa.Column("value", sa.String(length=78), nullable=False),
        sa.Column("gasUsed", sa.String(length=78), nullable=False),
        sa.Column("gasPrice", sa.String(length=78), nullable=False),
        sa.Column("data", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("transactionType", sa.String(length=32), nullable=False),
        sa.Column("contractAddress", sa.String(length=42), nullable=True),
        sa.Column("isSonicXToken", sa.Boolean(), nullable=True),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("hash"),
        sa.UniqueConstraint("id"),
        schema=SCHEMA,
    )
    op.create_index(
        op.f("ix_transaction_blockNumber"),
        "transaction",
        ["blockNumber"],
        unique=False,
        schema=SCHEMA,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_transaction_blockNumber"), table_name="transaction", schema=SCHEMA)
    op.drop_table("transaction", schema=SCHEMA)
    op.drop_table("token", schema=SCHEMA)
    op.drop_table("processed_block", schema=SCHEMA)

    if SCHEMA:
        op.execute(f"DROP SCHEMA IF EXISTS {SCHEMA} RESTRICT")
