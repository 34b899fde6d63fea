"""Vault accountant - the single pooled payroll balance."""

from __future__ import annotations

import logging
from uuid import UUID

from payroll_vault.ledger.auth import Authorizer, CallerContext
from payroll_vault.ledger.errors import InsufficientFunds, InvalidAmount, ZeroAmount
from payroll_vault.ledger.events import EventEmitter, EventMetadata, FundsDeposited
from payroll_vault.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


def is_whole(value: object) -> bool:
    """Amounts, frequencies and times are plain ints (bool excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


class VaultAccountant:
    """Tracks the vault balance.

    Notes:
    - The balance never goes negative (checked here and by a DB constraint).
    - ``debit`` is internal to settlement and is not exposed by the facade.
    """

    def __init__(
        self,
        store: LedgerStore,
        emitter: EventEmitter,
        authorizer: Authorizer,
        source_service: str = "payroll_vault",
    ):
        self.store = store
        self.emitter = emitter
        self.authorizer = authorizer
        self.source_service = source_service

    def balance(self) -> int:
        """Current vault balance."""
        return self.store.vault().total_funds

    def deposit(
        self,
        caller: CallerContext,
        amount: int,
        *,
        correlation_id: UUID | None = None,
    ) -> int:
        """Add funds to the vault.

        Args:
            caller: Must be the employer
            amount: Positive amount in value units
            correlation_id: Optional correlation for the emitted event

        Returns:
            The balance after the deposit
        """
        self.authorizer.require_employer(caller, "deposit")
        if not is_whole(amount):
            raise InvalidAmount(amount, f"Deposit amount must be a whole number, got {amount!r}")
        if amount <= 0:
            raise ZeroAmount(amount)

        vault = self.store.vault()
        with self.emitter.batch() as batch:
            vault.total_funds += amount
            self.store.flush()
            batch.add(
                FundsDeposited(
                    metadata=EventMetadata.create(
                        correlation_id=correlation_id,
                        actor=caller.normalized,
                        actor_type=caller.actor_type,
                        source_service=self.source_service,
                    ),
                    employer=self.authorizer.employer,
                    amount=amount,
                    balance_after=vault.total_funds,
                )
            )

        logger.info("Deposited %d, vault balance %d", amount, vault.total_funds)
        return vault.total_funds

    def debit(self, amount: int) -> int:
        """Remove funds for a salary payment. Returns the new balance."""
        vault = self.store.vault()
        if amount > vault.total_funds:
            raise InsufficientFunds(required=amount, available=vault.total_funds)

        vault.total_funds -= amount
        return vault.total_funds
