"""
Error handling and recovery service for the launchpad.

This service turns raw failures from the deploy service and the RPC node into
caller-safe messages, and decides when a transaction is worth resubmitting.
"""

import re
from typing import Any, Dict, Optional

import structlog

from launchpad.config import settings
from launchpad.utils.exceptions import DeploymentFault, DeploymentFaultKind

MAX_MESSAGE_LENGTH = 200
INTERNAL_ERROR_MESSAGE = "Internal error during transaction"

FUNDING_SHORTFALL_MESSAGE = "Insufficient gas, contact support"
TRANSIENT_CONFLICT_MESSAGE = "Transaction conflict, please retry"
GENERIC_DEPLOY_MESSAGE = "Deployment failed, please retry or contact support"

# Anything that looks like key material, an address/hash, a file path or a
# stack frame is withheld from callers
_SENSITIVE_PATTERNS = (
    re.compile(r"PRIVATE_KEY", re.IGNORECASE),
    re.compile(r"0x[0-9a-fA-F]"),
    re.compile(r"(^|\s)/[\w.-]+/[\w./-]+"),
    re.compile(r"[A-Za-z]:\\"),
    re.compile(r"Traceback|File \""),
)

_TRANSIENT_MARKERS = ("nonce", "replacement transaction underpriced", "already known")


class ErrorHandler:
    """Handle launch and fee errors and recovery"""

    def __init__(self):
        self.logger = structlog.get_logger()

    def sanitize(self, error: Any) -> str:
        """
        Produce a message that is safe to return to a caller.

        Args:
            error: An exception or a plain message

        Returns:
            A generic message if the input leaks internals, otherwise the
            message truncated to 200 characters
        """
        message = str(error) if error is not None else ""
        if any(pattern.search(message) for pattern in _SENSITIVE_PATTERNS):
            return INTERNAL_ERROR_MESSAGE
        if len(message) > MAX_MESSAGE_LENGTH:
            return message[:MAX_MESSAGE_LENGTH] + "..."
        return message

    def classify_deploy_failure(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> DeploymentFault:
        """
        Map a deployment failure onto a coarse, caller-safe fault.

        The full error is logged here and nowhere else.
        """
        raw = str(error)
        lowered = raw.lower()

        if "insufficient funds" in lowered:
            fault = DeploymentFault(DeploymentFaultKind.FUNDING_SHORTFALL, FUNDING_SHORTFALL_MESSAGE)
        elif self.is_transient(error):
            fault = DeploymentFault(DeploymentFaultKind.TRANSIENT_CONFLICT, TRANSIENT_CONFLICT_MESSAGE)
        else:
            fault = DeploymentFault(DeploymentFaultKind.GENERIC, GENERIC_DEPLOY_MESSAGE)

        self.logger.error(
            "Deployment failed",
            error=raw,
            error_type=type(error).__name__,
            fault=fault.kind.value,
            context=context or {},
        )
        return fault

    def handle_validation_error(self, error: Exception, request: Dict[str, Any]) -> None:
        self.logger.warning(
            "Validation error",
            error=str(error),
            request=request,
            note="Rejected launch requests are expected and only logged",
        )

    def is_transient(self, error: Exception) -> bool:
        """Nonce races between transactions from the platform wallet clear on resubmission"""
        lowered = str(error).lower()
        return any(marker in lowered for marker in _TRANSIENT_MARKERS)

    def should_retry(self, attempt: int) -> bool:
        """
        Determine if an operation should be retried.

        Args:
            attempt: The current retry attempt number

        Returns:
            True if the operation should be retried, False otherwise
        """
        return attempt < settings.MAX_RETRIES

    def get_retry_delay(self, attempt: int) -> int:
        """
        Calculate the retry delay with exponential backoff.

        Args:
            attempt: The current retry attempt number

        Returns:
            The delay in seconds
        """
        delay = settings.RETRY_DELAY * (2 ** (attempt - 1))
        self.logger.info("Retrying operation", attempt=attempt, delay=delay)
        return delay
