"""Create launchpad schema (tokens, fee_claims)

Revision ID: 20261016_01
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261016_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    tokenstatus = sa.Enum("active", "inactive", name="tokenstatus")

    op.create_table(
        "tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("symbol", sa.String(length=10), nullable=False),
        sa.Column("token_address", sa.String(length=42), nullable=False),
        sa.Column("tx_hash", sa.String(length=66), nullable=False),
        sa.Column("requester_address", sa.String(length=42), nullable=False),
        sa.Column("requester_bps", sa.Integer(), nullable=False),
        sa.Column("platform_bps", sa.Integer(), nullable=False),
        sa.Column("vault_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("twitter", sa.String(), nullable=True),
        sa.Column(
            "total_fees_claimed_paired",
            sa.Numeric(precision=38, scale=18),
            nullable=False,
            server_default="0",
            comment="Cumulative fees claimed in the paired asset (e.g. WETH), whole units",
        ),
        sa.Column(
            "total_fees_claimed_token",
            sa.Numeric(precision=38, scale=18),
            nullable=False,
            server_default="0",
            comment="Cumulative fees claimed in the issued token, whole units",
        ),
        sa.Column("status", tokenstatus, nullable=False, server_default="active"),
        sa.Column("deployed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("tokens_pkey")),
    )
    op.create_index(op.f("ix_tokens_token_address"), "tokens", ["token_address"], unique=True)
    op.create_index(op.f("ix_tokens_symbol"), "tokens", ["symbol"], unique=False)
    op.create_index(op.f("ix_tokens_requester_address"), "tokens", ["requester_address"], unique=False)
    op.create_index(op.f("ix_tokens_status"), "tokens", ["status"], unique=False)
    op.create_index(op.f("ix_tokens_deployed_at"), "tokens", ["deployed_at"], unique=False)
    # Case-insensitive address lookups
    op.execute("CREATE INDEX ix_tokens_token_address_lower ON tokens (lower(token_address))")
    op.execute("CREATE INDEX ix_tokens_requester_address_lower ON tokens (lower(requester_address))")

    op.create_table(
        "fee_claims",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("token_address", sa.String(length=42), nullable=False),
        sa.Column("tx_hash", sa.String(length=66), nullable=False),
        sa.Column("paired_claimed", sa.Numeric(precision=38, scale=18), nullable=False, server_default="0"),
        sa.Column("token_claimed", sa.Numeric(precision=38, scale=18), nullable=False, server_default="0"),
        sa.Column("claimed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["token_address"], ["tokens.token_address"], name=op.f("fee_claims_token_address_fkey")),
        sa.PrimaryKeyConstraint("id", name=op.f("fee_claims_pkey")),
    )
    op.create_index(op.f("ix_fee_claims_token_address"), "fee_claims", ["token_address"], unique=False)
    op.create_index(op.f("ix_fee_claims_claimed_at"), "fee_claims", ["claimed_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_fee_claims_claimed_at"), table_name="fee_claims")
    op.drop_index(op.f("ix_fee_claims_token_address"), table_name="fee_claims")
    op.drop_table("fee_claims")

    op.execute("DROP INDEX IF EXISTS ix_tokens_requester_address_lower")
    op.execute("DROP INDEX IF EXISTS ix_tokens_token_address_lower")
    op.drop_index(op.f("ix_tokens_deployed_at"), table_name="tokens")
    op.drop_index(op.f("ix_tokens_status"), table_name="tokens")
    op.drop_index(op.f("ix_tokens_requester_address"), table_name="tokens")
    op.drop_index(op.f("ix_tokens_symbol"), table_name="tokens")
    op.drop_index(op.f("ix_tokens_token_address"), table_name="tokens")
    op.drop_table("tokens")
    sa.Enum(name="tokenstatus").drop(op.get_bind(), checkfirst=True)
