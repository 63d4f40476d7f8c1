"""
Launch request validation.

Every rule is evaluated independently so a caller sees all problems in one
round trip. Errors block a launch, warnings never do.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from launchpad.api.models import LaunchRequest
from launchpad.config import settings
from launchpad.services.token_store import TokenStore
from launchpad.utils.amounts import to_decimal
from launchpad.utils.evm import is_valid_address

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 1000
MIN_SYMBOL_LENGTH = 2
MAX_SYMBOL_LENGTH = 10
MAX_VAULT_PERCENTAGE = 90
HIGH_VAULT_PERCENTAGE = 50
MIN_LOCKUP_DAYS = 7
MIN_TRADING_FEE_BPS = 10
MAX_TRADING_FEE_BPS = 500
HIGH_TRADING_FEE_BPS = 200
MAX_FEE_SPLIT_ENTRIES = 5
MAX_FEE_SPLIT_SHARE = 80
ESTIMATED_GAS = "~0.005-0.02 ETH"

SYMBOL_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
SCAM_KEYWORDS = re.compile(r"free|airdrop|guaranteed|100x|get rich", re.IGNORECASE)
IMAGE_SCHEMES = ("https://", "ipfs://")


@dataclass
class LaunchValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    normalized: Optional[Dict[str, Any]] = None

    def __bool__(self):
        return self.valid

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "normalized": self.normalized,
        }


class LaunchValidator:
    """Validate launch requests before anything touches the chain"""

    def __init__(self, token_store: Optional[TokenStore] = None, platform_fee_bps: Optional[int] = None):
        self.token_store = token_store
        self.platform_fee_bps = platform_fee_bps if platform_fee_bps is not None else settings.PLATFORM_FEE_BPS

    def validate(self, request: LaunchRequest) -> LaunchValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        self._check_name(request, errors, warnings)
        self._check_symbol(request, errors, warnings)
        self._check_requester(request, errors)
        self._check_description(request, errors)
        self._check_image(request, errors, warnings)
        self._check_vault(request, errors, warnings)
        self._check_trading_fee(request, errors, warnings)
        self._check_fee_split(request, errors)

        normalized = None
        if not errors:
            normalized = {
                "name": request.name,
                "symbol": request.symbol.upper(),
                "requester": request.requester,
                "platform_fee_bps": self.platform_fee_bps,
                "vault_percentage": request.vault.percentage if request.vault else 0,
                "estimated_gas": ESTIMATED_GAS,
            }

        return LaunchValidationResult(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            normalized=normalized,
        )

    def _check_name(self, request: LaunchRequest, errors: List[str], warnings: List[str]) -> None:
        name = request.name
        if not name or not name.strip():
            errors.append("Token name is required")
            return

        if len(name) > MAX_NAME_LENGTH:
            errors.append(f"Token name must be {MAX_NAME_LENGTH} characters or less")
        if "<" in name:
            errors.append("Token name cannot contain HTML tags")
        if SCAM_KEYWORDS.search(name):
            warnings.append("Token name contains potentially misleading terms")

    def _check_symbol(self, request: LaunchRequest, errors: List[str], warnings: List[str]) -> None:
        symbol = request.symbol
        if not symbol or not symbol.strip():
            errors.append("Token symbol is required")
            return

        if not MIN_SYMBOL_LENGTH <= len(symbol) <= MAX_SYMBOL_LENGTH:
            errors.append(f"Symbol must be {MIN_SYMBOL_LENGTH}-{MAX_SYMBOL_LENGTH} characters")
        if not SYMBOL_PATTERN.match(symbol):
            errors.append("Symbol must be alphanumeric only")

        # Advisory only: symbols are not reserved globally
        if self.token_store is not None and self.token_store.find_by_symbol(symbol) is not None:
            warnings.append(f"Symbol {symbol.upper()} was already deployed through {settings.PLATFORM_NAME}")

    def _check_requester(self, request: LaunchRequest, errors: List[str]) -> None:
        if not request.requester:
            errors.append("Client wallet address is required")
        elif not is_valid_address(request.requester):
            errors.append("Invalid wallet address format")

    def _check_description(self, request: LaunchRequest, errors: List[str]) -> None:
        description = request.description
        if not description:
            return
        if len(description) > MAX_DESCRIPTION_LENGTH:
            errors.append(f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less")
        if "<" in description:
            errors.append("Description cannot contain HTML tags")

    def _check_image(self, request: LaunchRequest, errors: List[str], warnings: List[str]) -> None:
        if request.image:
            if not request.image.startswith(IMAGE_SCHEMES):
                errors.append("Image must be a valid HTTPS or IPFS URL")
        else:
            warnings.append("No image provided, token will have no logo on DexScreener")

    def _check_vault(self, request: LaunchRequest, errors: List[str], warnings: List[str]) -> None:
        vault = request.vault
        if vault is None:
            warnings.append("No vault configured, consider vaulting 10-20% to signal commitment")
            return

        if vault.percentage < 0 or vault.percentage > MAX_VAULT_PERCENTAGE:
            errors.append(f"Vault percentage must be 0-{MAX_VAULT_PERCENTAGE}")
        if vault.lockup_days < MIN_LOCKUP_DAYS:
            errors.append(f"Minimum lockup is {MIN_LOCKUP_DAYS} days")
        if vault.vesting_days < 0:
            errors.append("Vesting days cannot be negative")
        if vault.percentage > HIGH_VAULT_PERCENTAGE:
            warnings.append("Vaulting >50% locks most of the supply, trading volume may be low")

    def _check_trading_fee(self, request: LaunchRequest, errors: List[str], warnings: List[str]) -> None:
        fees = request.fees
        if fees is None:
            return

        if fees.type != "static":
            errors.append("Dynamic fees not supported, use static fees")
        if fees.bps is None:
            return
        if fees.bps < MIN_TRADING_FEE_BPS or fees.bps > MAX_TRADING_FEE_BPS:
            errors.append(f"Trading fee must be {MIN_TRADING_FEE_BPS}-{MAX_TRADING_FEE_BPS} bps (0.1%-5%)")
        if fees.bps > HIGH_TRADING_FEE_BPS:
            warnings.append("Trading fee >2% may reduce volume significantly")

    def _check_fee_split(self, request: LaunchRequest, errors: List[str]) -> None:
        entries = request.fee_split
        if not entries:
            return

        if len(entries) > MAX_FEE_SPLIT_ENTRIES:
            errors.append(f"Maximum {MAX_FEE_SPLIT_ENTRIES} fee split recipients")

        total_share = sum(to_decimal(entry.share) for entry in entries)
        if total_share > MAX_FEE_SPLIT_SHARE:
            errors.append(f"Fee split total cannot exceed {MAX_FEE_SPLIT_SHARE}%")

        seen = set()
        for entry in entries:
            if not is_valid_address(entry.address):
                errors.append(f"Invalid wallet address in fee split for {entry.role or 'recipient'}")
            lowered = entry.address.lower()
            if lowered in seen:
                errors.append(f"Duplicate wallet in fee split: {entry.address}")
            seen.add(lowered)
