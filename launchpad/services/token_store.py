"""
Deployment record store: the single point of truth for issued tokens and the
fee-claim ledger.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import structlog
from sqlalchemy import func, update
from sqlalchemy.orm import Session

from launchpad.database.connection import SessionLocal
from launchpad.models.fee_claim import FeeClaim
from launchpad.models.token import Token, TokenStatus
from launchpad.utils.amounts import ZERO, to_decimal
from launchpad.utils.exceptions import TokenNotFoundError
from launchpad.utils.timeutils import utcnow

logger = structlog.get_logger()

SORT_NEWEST = "newest"
SORT_FEES = "fees"


class TokenStore:
    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    @contextmanager
    def _session(self):
        session: Session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def insert_token(
        self,
        name: str,
        symbol: str,
        token_address: str,
        tx_hash: str,
        requester_address: str,
        requester_bps: int,
        platform_bps: int,
        vault_percentage: int = 0,
        description: Optional[str] = None,
        image: Optional[str] = None,
        website: Optional[str] = None,
        twitter: Optional[str] = None,
        deployed_at: Optional[datetime] = None,
    ) -> Token:
        with self._session() as session:
            token = Token(
                name=name,
                symbol=symbol,
                token_address=token_address,
                tx_hash=tx_hash,
                requester_address=requester_address,
                requester_bps=requester_bps,
                platform_bps=platform_bps,
                vault_percentage=vault_percentage,
                description=description,
                image=image,
                website=website,
                twitter=twitter,
                total_fees_claimed_paired=ZERO,
                total_fees_claimed_token=ZERO,
                status=TokenStatus.ACTIVE,
                deployed_at=deployed_at or utcnow(),
            )
            try:
                session.add(token)
                session.commit()
                session.refresh(token)
            except Exception as e:
                session.rollback()
                logger.error("Failed to record deployment", token_address=token_address, error=str(e))
                raise

            logger.info(
                "Deployment recorded",
                token_address=token_address,
                symbol=symbol,
                requester=requester_address,
            )
            return token

    def get_token_by_address(self, token_address: str) -> Optional[Token]:
        with self._session() as session:
            return (
                session.query(Token)
                .filter(func.lower(Token.token_address) == token_address.lower())
                .first()
            )

    def find_by_symbol(self, symbol: str) -> Optional[Token]:
        """Case-insensitive lookup of any prior launch using this symbol"""
        with self._session() as session:
            return session.query(Token).filter(func.lower(Token.symbol) == symbol.lower()).first()

    def list_tokens(
        self,
        status: Optional[str] = None,
        sort: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Token], int]:
        with self._session() as session:
            query = session.query(Token)
            if status:
                query = query.filter(Token.status == TokenStatus(status))

            if sort == SORT_FEES:
                query = query.order_by(Token.total_fees_claimed_paired.desc(), Token.id.desc())
            else:
                query = query.order_by(Token.deployed_at.desc(), Token.id.desc())

            total = query.count()
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return query.all(), total

    def list_active_tokens(self) -> List[Token]:
        tokens, _ = self.list_tokens(status=TokenStatus.ACTIVE.value)
        return tokens

    def list_tokens_by_requester(self, requester_address: str) -> List[Token]:
        with self._session() as session:
            return (
                session.query(Token)
                .filter(func.lower(Token.requester_address) == requester_address.lower())
                .order_by(Token.deployed_at.desc(), Token.id.desc())
                .all()
            )

    def latest_launch_at(self, requester_address: str) -> Optional[datetime]:
        with self._session() as session:
            return (
                session.query(func.max(Token.deployed_at))
                .filter(func.lower(Token.requester_address) == requester_address.lower())
                .scalar()
            )

    def record_fee_claim(
        self,
        token_address: str,
        tx_hash: str,
        paired_claimed: Decimal,
        token_claimed: Decimal,
    ) -> FeeClaim:
        """
        Append a ledger row and bump the token's running totals in one transaction.

        The increments are applied in SQL (``col = col + :amount``) so concurrent
        writers never lose an update.
        """
        paired_claimed = to_decimal(paired_claimed)
        token_claimed = to_decimal(token_claimed)

        with self._session() as session:
            try:
                token = (
                    session.query(Token)
                    .filter(func.lower(Token.token_address) == token_address.lower())
                    .first()
                )
                if token is None:
                    raise TokenNotFoundError(f"Token {token_address} is not tracked")

                claim = FeeClaim(
                    token_address=token.token_address,
                    tx_hash=tx_hash,
                    paired_claimed=paired_claimed,
                    token_claimed=token_claimed,
                    claimed_at=utcnow(),
                )
                session.add(claim)
                session.execute(
                    update(Token)
                    .where(Token.id == token.id)
                    .values(
                        total_fees_claimed_paired=Token.total_fees_claimed_paired + paired_claimed,
                        total_fees_claimed_token=Token.total_fees_claimed_token + token_claimed,
                        updated_at=utcnow(),
                    )
                )
                session.commit()
                session.refresh(claim)
            except Exception as e:
                session.rollback()
                logger.error("Failed to record fee claim", token_address=token_address, error=str(e))
                raise

            logger.info(
                "Fee claim recorded",
                token_address=token_address,
                tx_hash=tx_hash,
                paired_claimed=str(paired_claimed),
                token_claimed=str(token_claimed),
            )
            return claim

    def list_fee_claims(self, token_address: str) -> List[FeeClaim]:
        with self._session() as session:
            return (
                session.query(FeeClaim)
                .filter(func.lower(FeeClaim.token_address) == token_address.lower())
                .order_by(FeeClaim.claimed_at.desc(), FeeClaim.id.desc())
                .all()
            )

    def set_status(self, token_address: str, status: TokenStatus) -> Token:
        with self._session() as session:
            token = (
                session.query(Token)
                .filter(func.lower(Token.token_address) == token_address.lower())
                .first()
            )
            if token is None:
                raise TokenNotFoundError(f"Token {token_address} is not tracked")
            token.status = status
            session.commit()
            session.refresh(token)
            logger.info("Token status changed", token_address=token_address, status=status.value)
            return token

    def get_stats(self, period: Optional[str] = None) -> Dict:
        """Aggregate platform statistics; ``period="24h"`` limits to the last day"""
        since = utcnow() - timedelta(days=1) if period == "24h" else None

        with self._session() as session:
            tokens = session.query(Token)
            claims = session.query(FeeClaim)
            if since is not None:
                tokens = tokens.filter(Token.deployed_at >= since)
                claims = claims.filter(FeeClaim.claimed_at >= since)

            total = tokens.count()
            active = tokens.filter(Token.status == TokenStatus.ACTIVE).count()
            clients = tokens.with_entities(func.count(func.distinct(func.lower(Token.requester_address)))).scalar()
            fees = tokens.with_entities(func.coalesce(func.sum(Token.total_fees_claimed_paired), 0)).scalar()

            return {
                "total_tokens_deployed": total,
                "active_tokens": active,
                "unique_clients": clients or 0,
                "total_fees_claimed_paired": to_decimal(fees),
                "total_fee_claims": claims.count(),
            }
