from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func

from .base import Base


class FeeClaim(Base):
    __tablename__ = "fee_claims"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_address = Column(String(42), ForeignKey("tokens.token_address"), nullable=False, index=True)
    tx_hash = Column(String(66), nullable=False)
    paired_claimed = Column(Numeric(precision=38, scale=18), nullable=False, default=0)
    token_claimed = Column(Numeric(precision=38, scale=18), nullable=False, default=0)
    claimed_at = Column(DateTime, nullable=False, default=func.now(), index=True)
