from .base import Base
from .token import Token, TokenStatus
from .fee_claim import FeeClaim

__all__ = [
    "Base",
    "Token",
    "TokenStatus",
    "FeeClaim",
]
