"""
Read-only reporting over the deployment ledger
"""

from typing import Dict, List, Optional

from launchpad.models.token import Token
from launchpad.services.token_store import TokenStore
from launchpad.utils.amounts import ZERO, format_fixed, normalize_amount
from launchpad.utils.timeutils import isoformat_utc

CHAIN_NAME = "base"
SORT_BY_LAUNCHES = "launches"
SORT_BY_FEES = "fees"
MAX_LEADERBOARD_SIZE = 100


def build_links(token_address: str) -> Dict[str, str]:
    return {
        "basescan": f"https://basescan.org/token/{token_address}",
        "dexscreener": f"https://dexscreener.com/base/{token_address}",
        "clanker": f"https://www.clanker.world/clanker/{token_address}",
        "uniswap": f"https://app.uniswap.org/swap?outputCurrency={token_address}&chain=base",
    }


class AnalyticsService:
    def __init__(self, token_store: TokenStore):
        self.token_store = token_store

    @staticmethod
    def _token_analytics(token: Token) -> Dict:
        return {
            "name": token.name,
            "symbol": token.symbol,
            "token_address": token.token_address,
            "chain": CHAIN_NAME,
            "deployed_at": isoformat_utc(token.deployed_at),
            "requester_address": token.requester_address,
            "platform_fee_bps": token.platform_bps,
            "client_fee_bps": token.requester_bps,
            "vault_percentage": token.vault_percentage,
            "total_fees_claimed_paired": normalize_amount(token.total_fees_claimed_paired or ZERO),
            "total_fees_claimed_token": normalize_amount(token.total_fees_claimed_token or ZERO),
            "status": token.status.value,
            "links": build_links(token.token_address),
        }

    def token_analytics(self, token_address: str) -> Optional[Dict]:
        token = self.token_store.get_token_by_address(token_address)
        if token is None:
            return None
        return self._token_analytics(token)

    def agent_analytics(self, wallet: str) -> Dict:
        # Newest first
        tokens = self.token_store.list_tokens_by_requester(wallet)
        total_fees = sum((t.total_fees_claimed_paired or ZERO for t in tokens), ZERO)

        return {
            "wallet": wallet,
            "total_launches": len(tokens),
            "tokens": [self._token_analytics(t) for t in tokens],
            "total_fees_earned": format_fixed(total_fees),
            "first_launch": isoformat_utc(tokens[-1].deployed_at) if tokens else None,
            "latest_launch": isoformat_utc(tokens[0].deployed_at) if tokens else None,
        }

    def leaderboard(self, sort_by: str = SORT_BY_LAUNCHES, limit: int = 50) -> List[Dict]:
        limit = max(1, min(limit, MAX_LEADERBOARD_SIZE))
        tokens, _ = self.token_store.list_tokens()

        by_requester: Dict[str, List[Token]] = {}
        for token in tokens:
            by_requester.setdefault(token.requester_address.lower(), []).append(token)

        entries = []
        for requester_tokens in by_requester.values():
            latest = requester_tokens[0]
            fees = sum((t.total_fees_claimed_paired or ZERO for t in requester_tokens), ZERO)
            entries.append(
                {
                    "wallet": latest.requester_address,
                    "launches": len(requester_tokens),
                    "fees": fees,
                    "latest_token": latest.name,
                    "latest_symbol": latest.symbol,
                }
            )

        if sort_by == SORT_BY_FEES:
            entries.sort(key=lambda e: e["fees"], reverse=True)
        else:
            entries.sort(key=lambda e: e["launches"], reverse=True)

        return [
            {
                "rank": rank,
                "wallet": entry["wallet"],
                "launches": entry["launches"],
                "total_fees_earned": format_fixed(entry["fees"]),
                "latest_token": entry["latest_token"],
                "latest_symbol": entry["latest_symbol"],
            }
            for rank, entry in enumerate(entries[:limit], start=1)
        ]
