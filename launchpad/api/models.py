from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from launchpad.models.token import TokenStatus


class OrmConfig(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class AliasConfig(BaseModel):
    """Accept both the camelCase names agents send and the snake_case field names"""

    model_config = ConfigDict(populate_by_name=True)


# Launch request models; range and format rules are reported by LaunchValidator
class VaultSpec(AliasConfig):
    percentage: int = Field(description="Share of supply locked in the vault (0-90)")
    lockup_days: int = Field(alias="lockupDays", description="Lockup before any vesting, minimum 7 days")
    vesting_days: int = Field(default=0, alias="vestingDays", description="Linear vesting after lockup; 0 = cliff")


class TradingFeeSpec(AliasConfig):
    type: str = Field(default="static", description="Only static fees are supported")
    bps: Optional[int] = Field(default=None, description="Trading fee in basis points (10-500)")


class FeeSplitEntry(AliasConfig):
    address: str = Field(alias="wallet", description="Recipient wallet")
    share: float = Field(description="Percentage share of the requester allocation (e.g. 30 = 30%)")
    role: str = Field(default="", description="Label such as 'dev' or 'marketing'")


class LaunchRequest(AliasConfig):
    name: Optional[str] = Field(default=None, description="Token name (max 100 chars)")
    symbol: Optional[str] = Field(default=None, description="Token symbol (2-10 alphanumeric chars)")
    requester: Optional[str] = Field(default=None, alias="clientWallet", description="Requester wallet address")
    description: Optional[str] = None
    image: Optional[str] = Field(default=None, description="https:// or ipfs:// image reference")
    website: Optional[str] = None
    twitter: Optional[str] = None
    vault: Optional[VaultSpec] = None
    fees: Optional[TradingFeeSpec] = None
    fee_split: Optional[List[FeeSplitEntry]] = Field(default=None, alias="feeSplit")
    initial_buy: Optional[Decimal] = Field(default=None, alias="devBuyEth", description="Initial buy in paired asset")
    agent_id: Optional[int] = Field(default=None, alias="agentId", description="Identity registry agent id")


class NormalizedLaunch(BaseModel):
    name: str
    symbol: str
    requester: str
    platform_fee_bps: int
    vault_percentage: int
    estimated_gas: str


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[str]
    warnings: List[str]
    normalized: Optional[NormalizedLaunch] = None


class RewardRecipientItem(OrmConfig):
    recipient: str
    admin: str
    bps: int
    token_scope: str
    label: str


class LaunchedTokenInfo(BaseModel):
    address: str
    tx_hash: str
    links: dict


class LaunchResponse(BaseModel):
    success: bool = True
    request_id: Optional[str] = None
    token: LaunchedTokenInfo
    rewards: List[RewardRecipientItem]
    warnings: List[str] = Field(default_factory=list)
    message: str


class RateLimitResponse(BaseModel):
    allowed: bool
    next_allowed_at: Optional[str] = None
    remaining_ms: int
    cooldown: Optional[str] = None


# Record models
class TokenItem(OrmConfig):
    id: int
    name: str
    symbol: str
    token_address: str
    tx_hash: str
    requester_address: str
    requester_bps: int
    platform_bps: int
    vault_percentage: int
    description: Optional[str] = None
    image: Optional[str] = None
    website: Optional[str] = None
    twitter: Optional[str] = None
    deployed_at: datetime
    total_fees_claimed_paired: Decimal
    total_fees_claimed_token: Decimal
    status: TokenStatus

    @field_serializer("total_fees_claimed_paired", "total_fees_claimed_token")
    def serialize_dec_to_str(self, v: Decimal, _info):
        return str(v) if v is not None else None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TokenListResponse(BaseModel):
    tokens: List[TokenItem]
    pagination: Pagination


# Fee models
class RecipientFees(BaseModel):
    wallet: str
    paired_amount: Decimal
    token_amount: Decimal

    @field_serializer("paired_amount", "token_amount")
    def serialize_amount_to_str(self, v: Decimal, _info):
        return str(v) if v is not None else None


class FeeCheckResponse(BaseModel):
    token_address: str
    available: bool
    platform: RecipientFees
    client: Optional[RecipientFees] = None


class FeeClaimItem(BaseModel):
    token_address: str
    tx_hash: str
    tx_hashes: List[str]
    paired_claimed: Decimal
    token_claimed: Decimal
    claimed_at: str

    @field_serializer("paired_claimed", "token_claimed")
    def serialize_claim_to_str(self, v: Decimal, _info):
        return str(v) if v is not None else None


class ClaimError(BaseModel):
    address: str
    error: str


class ClaimAllResponse(BaseModel):
    claimed: List[FeeClaimItem]
    skipped: List[str]
    errors: List[ClaimError]


class TokenFeeItem(BaseModel):
    token_address: str
    symbol: str
    platform_amount: Decimal
    client_amount: Decimal
    total: Decimal

    @field_serializer("platform_amount", "client_amount", "total")
    def serialize_fee_to_str(self, v: Decimal, _info):
        return str(v) if v is not None else None


class FeeAggregateResponse(BaseModel):
    total_paired_value: Decimal
    token_count: int
    tokens: List[TokenFeeItem]
    built_at: str
    expires_at: str

    @field_serializer("total_paired_value")
    def serialize_total_to_str(self, v: Decimal, _info):
        return str(v) if v is not None else None


# Analytics models
class StatsResponse(BaseModel):
    total_tokens_deployed: int
    active_tokens: int
    unique_clients: int
    total_fees_claimed_paired: Decimal
    total_fee_claims: int

    @field_serializer("total_fees_claimed_paired")
    def serialize_stats_to_str(self, v: Decimal, _info):
        return str(v) if v is not None else None


class TokenAnalytics(BaseModel):
    name: str
    symbol: str
    token_address: str
    chain: str
    deployed_at: str
    requester_address: str
    platform_fee_bps: int
    client_fee_bps: int
    vault_percentage: int
    total_fees_claimed_paired: str
    total_fees_claimed_token: str
    status: str
    links: dict


class AgentAnalytics(BaseModel):
    wallet: str
    total_launches: int
    tokens: List[TokenAnalytics]
    total_fees_earned: str
    first_launch: Optional[str] = None
    latest_launch: Optional[str] = None


class LeaderboardEntry(BaseModel):
    rank: int
    wallet: str
    launches: int
    total_fees_earned: str
    latest_token: str
    latest_symbol: str


class ErrorResponse(BaseModel):
    detail: str
    status: int
    request_id: Optional[str] = None
