"""Ledger services package."""

from payroll_vault.ledger.services.eligibility import (
    Eligibility,
    EligibilityReason,
    PayableRecord,
    evaluate,
    is_due,
)
from payroll_vault.ledger.services.registry import EmployeeRegistry
from payroll_vault.ledger.services.settlement import (
    Settlement,
    SettlementEngine,
    SettlementPass,
    SkippedEmployee,
)
from payroll_vault.ledger.services.trigger import TriggerAdapter, UpkeepCheck
from payroll_vault.ledger.services.vault import VaultAccountant

__all__ = [
    # Eligibility
    "Eligibility",
    "EligibilityReason",
    "PayableRecord",
    "evaluate",
    "is_due",
    # Registry
    "EmployeeRegistry",
    # Vault
    "VaultAccountant",
    # Settlement
    "Settlement",
    "SettlementEngine",
    "SettlementPass",
    "SkippedEmployee",
    # Trigger
    "TriggerAdapter",
    "UpkeepCheck",
]
