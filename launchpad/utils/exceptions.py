"""
Launchpad exception handling and standardized error codes
"""

from enum import Enum
from typing import List, Optional


class LaunchErrorCodes:
    """Standardized error codes for launch and fee operations"""

    # Caller input
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_ALLOCATION = "INVALID_ALLOCATION"

    # Admission
    RATE_LIMITED = "RATE_LIMITED"
    IDENTITY_REJECTED = "IDENTITY_REJECTED"

    # Deployment
    DEPLOYMENT_REJECTED = "DEPLOYMENT_REJECTED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    TRANSACTION_CONFLICT = "TRANSACTION_CONFLICT"
    DEPLOYMENT_FAILED = "DEPLOYMENT_FAILED"

    # Records
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"

    UNKNOWN_PROCESSING_ERROR = "UNKNOWN_PROCESSING_ERROR"


class DeploymentFaultKind(Enum):
    FUNDING_SHORTFALL = "funding_shortfall"
    TRANSIENT_CONFLICT = "transient_conflict"
    GENERIC = "generic"


class LaunchpadError(Exception):

    error_code = LaunchErrorCodes.UNKNOWN_PROCESSING_ERROR

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        super().__init__(f"{self.error_code}: {message}")


class ValidationError(LaunchpadError):
    """Request failed validation; carries every error and warning found"""

    error_code = LaunchErrorCodes.VALIDATION_FAILED

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__("Validation failed")


class RateLimitError(LaunchpadError):

    error_code = LaunchErrorCodes.RATE_LIMITED

    def __init__(self, next_allowed_at, remaining_ms: int, cooldown: str):
        self.next_allowed_at = next_allowed_at
        self.remaining_ms = remaining_ms
        self.cooldown = cooldown
        super().__init__(f"Rate limited: next launch in {cooldown}")


class IdentityError(LaunchpadError):

    error_code = LaunchErrorCodes.IDENTITY_REJECTED


class AllocationError(LaunchpadError):

    error_code = LaunchErrorCodes.INVALID_ALLOCATION


class DeploymentRejected(LaunchpadError):
    """The deploy service declined the configuration before anything hit the chain"""

    error_code = LaunchErrorCodes.DEPLOYMENT_REJECTED


class DeploymentFault(LaunchpadError):
    """Failure during or after submission; message is always caller-safe"""

    _codes = {
        DeploymentFaultKind.FUNDING_SHORTFALL: LaunchErrorCodes.INSUFFICIENT_FUNDS,
        DeploymentFaultKind.TRANSIENT_CONFLICT: LaunchErrorCodes.TRANSACTION_CONFLICT,
        DeploymentFaultKind.GENERIC: LaunchErrorCodes.DEPLOYMENT_FAILED,
    }

    def __init__(self, kind: DeploymentFaultKind, message: str):
        self.kind = kind
        super().__init__(message, self._codes[kind])

    @property
    def retryable(self) -> bool:
        return self.kind is not DeploymentFaultKind.FUNDING_SHORTFALL


class TokenNotFoundError(LaunchpadError):

    error_code = LaunchErrorCodes.TOKEN_NOT_FOUND
