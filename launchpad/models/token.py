import enum
from typing import Any

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, Enum
from sqlalchemy.sql import func

from .base import Base


class TokenStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Token(Base):
    """
    A token issued through the launchpad. Rows are written once per confirmed
    deployment and never deleted; only the claimed-fee totals and the status move.
    """

    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    symbol = Column(String(10), nullable=False, index=True)
    token_address = Column(String(42), unique=True, index=True, nullable=False)
    tx_hash = Column(String(66), nullable=False)
    requester_address = Column(String(42), nullable=False, index=True)
    requester_bps = Column(Integer, nullable=False)
    platform_bps = Column(Integer, nullable=False)
    vault_percentage = Column(Integer, nullable=False, default=0)

    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    website = Column(String, nullable=True)
    twitter = Column(String, nullable=True)

    total_fees_claimed_paired = Column(
        Numeric(precision=38, scale=18),
        nullable=False,
        default=0,
        comment="Cumulative fees claimed in the paired asset (e.g. WETH), whole units",
    )
    total_fees_claimed_token = Column(
        Numeric(precision=38, scale=18),
        nullable=False,
        default=0,
        comment="Cumulative fees claimed in the issued token, whole units",
    )
    status: Any = Column(
        Enum(TokenStatus, name="tokenstatus", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TokenStatus.ACTIVE,
        index=True,
    )

    deployed_at = Column(DateTime, nullable=False, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Token(id={self.id}, symbol='{self.symbol}', address='{self.token_address}')>"
