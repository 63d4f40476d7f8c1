"""
Fee-revenue allocation in basis points.

The platform share ``P`` comes from server policy. The requester controls the
remaining ``10000 - P`` bps and may hand part of it to split recipients; any
rounding drift lands in the requester's residual, never in the platform share.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import List

from launchpad.api.models import LaunchRequest
from launchpad.utils.amounts import BPS_DENOMINATOR, percent_to_bps, to_decimal
from launchpad.utils.evm import is_valid_address
from launchpad.utils.exceptions import AllocationError

MAX_SPLIT_RECIPIENTS = 5
MAX_ENTRY_SHARE = 80

CLIENT_LABEL = "client"
PLATFORM_LABEL = "platform"


class TokenScope(Enum):
    """Which fee-bearing asset(s) a recipient is paid in"""

    BOTH = "Both"
    PAIRED = "Paired"
    ISSUED = "Issued"


@dataclass
class RewardRecipient:
    recipient: str
    admin: str
    bps: int
    token_scope: TokenScope = TokenScope.BOTH
    label: str = ""

    def to_deploy_dict(self) -> dict:
        """Shape sent to the deploy service; labels stay on our side"""
        return {
            "recipient": self.recipient,
            "admin": self.admin,
            "bps": self.bps,
            "token": self.token_scope.value,
        }

    def to_dict(self) -> dict:
        data = asdict(self)
        data["token_scope"] = self.token_scope.value
        return data


def compute_reward_allocation(
    request: LaunchRequest,
    platform_wallet: str,
    platform_fee_bps: int,
) -> List[RewardRecipient]:
    """
    Build the ordered recipient list for one launch.

    Order is split entries (input order), then the requester residual if any,
    then the platform. The returned bps always sum to exactly 10000.

    Raises:
        AllocationError: if the split violates a share, address or ceiling rule
    """
    if not 0 < platform_fee_bps <= BPS_DENOMINATOR:
        raise AllocationError(f"Platform fee must be between 1 and {BPS_DENOMINATOR} bps")

    requester = request.requester
    client_max_bps = BPS_DENOMINATOR - platform_fee_bps
    platform = RewardRecipient(
        recipient=platform_wallet,
        admin=platform_wallet,
        bps=platform_fee_bps,
        label=PLATFORM_LABEL,
    )

    if not request.fee_split:
        return [
            RewardRecipient(recipient=requester, admin=requester, bps=client_max_bps, label=CLIENT_LABEL),
            platform,
        ]

    if len(request.fee_split) > MAX_SPLIT_RECIPIENTS:
        raise AllocationError(f"Maximum {MAX_SPLIT_RECIPIENTS} fee split recipients allowed")

    recipients: List[RewardRecipient] = []
    used_bps = 0
    declared_share = to_decimal(0)
    for entry in request.fee_split:
        share = to_decimal(entry.share)
        if share <= 0 or share > MAX_ENTRY_SHARE:
            raise AllocationError(f"Invalid share {entry.share}% for {entry.role}")
        if not is_valid_address(entry.address):
            raise AllocationError(f"Invalid wallet for {entry.role}")

        bps = percent_to_bps(share)
        recipients.append(
            RewardRecipient(recipient=entry.address, admin=entry.address, bps=bps, label=entry.role)
        )
        used_bps += bps
        declared_share += share

    if declared_share * 100 > client_max_bps:
        raise AllocationError(
            f"Fee split total {declared_share}% exceeds client allocation {client_max_bps / 100}%"
        )

    # Half-up rounding can overshoot by at most one bp per entry; take it back
    # from the split entries, last first
    overshoot = used_bps - client_max_bps
    for entry in reversed(recipients):
        if overshoot <= 0:
            break
        if entry.bps <= 0:
            continue
        entry.bps -= 1
        overshoot -= 1
    used_bps = min(used_bps, client_max_bps)

    residual_bps = client_max_bps - used_bps
    if residual_bps > 0:
        recipients.append(
            RewardRecipient(recipient=requester, admin=requester, bps=residual_bps, label=CLIENT_LABEL)
        )

    recipients.append(platform)
    return recipients
