"""Authorization boundary for ledger mutations.

A single privileged identity (the employer) may deposit, manage employees
and settle salaries. The caller identity is always passed explicitly as a
``CallerContext``; nothing reads an ambient "current user".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from payroll_vault.ledger.errors import InvalidAddress, Unauthorized

logger = logging.getLogger(__name__)

NULL_ADDRESS = "0x" + "0" * 40


def normalize_address(address: str | None) -> str:
    """Normalize an address, rejecting empty and null identities."""
    if address is None:
        raise InvalidAddress(address)
    normalized = address.strip().lower()
    if not normalized:
        raise InvalidAddress(address)
    if normalized == NULL_ADDRESS or (
        normalized.startswith("0x") and len(normalized) > 2 and set(normalized[2:]) == {"0"}
    ):
        raise InvalidAddress(address)
    return normalized


@dataclass(frozen=True)
class CallerContext:
    """Identity of whoever invokes a ledger operation."""

    address: str | None
    actor_type: str = "user"  # 'user', 'scheduler', 'system'

    @classmethod
    def anonymous(cls, actor_type: str = "scheduler") -> CallerContext:
        """Context for open entry points (automation trigger)."""
        return cls(address=None, actor_type=actor_type)

    @property
    def normalized(self) -> str | None:
        if self.address is None:
            return None
        return self.address.strip().lower() or None


class Authorizer:
    """Checks callers against the employer recorded on the vault."""

    def __init__(self, employer_address: str):
        self._employer = normalize_address(employer_address)

    @property
    def employer(self) -> str:
        return self._employer

    def is_employer(self, caller: CallerContext) -> bool:
        return caller.normalized == self._employer

    def require_employer(self, caller: CallerContext, operation: str) -> None:
        """Raise Unauthorized unless the caller is the employer."""
        if not self.is_employer(caller):
            logger.warning("Rejected %s by %s", operation, caller.address)
            raise Unauthorized(caller.address, operation)
