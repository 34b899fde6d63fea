"""Payroll ledger package.

This package contains:
- Employee registry (add/deactivate, roster)
- Vault accountant (pooled balance)
- Eligibility policy (pure due/not-due predicate)
- Settlement engine (single and whole-roster settlement)
- Automation trigger adapter (probe/trigger)
- Domain events, metrics and the Payroll facade
"""

from payroll_vault.ledger.auth import (
    NULL_ADDRESS,
    Authorizer,
    CallerContext,
    normalize_address,
)
from payroll_vault.ledger.clock import Clock, FixedClock, SystemClock
from payroll_vault.ledger.config import LedgerConfig, validate_production_config
from payroll_vault.ledger.errors import (
    AlreadyActive,
    InsufficientFunds,
    InvalidAddress,
    InvalidAmount,
    InvalidFrequency,
    LedgerAlreadyInitialized,
    LedgerNotInitialized,
    NotActive,
    NothingDue,
    PayrollError,
    ReentrantCall,
    TooEarly,
    Unauthorized,
    ZeroAmount,
)
from payroll_vault.ledger.payroll import Payroll
from payroll_vault.ledger.services import (
    Eligibility,
    EligibilityReason,
    EmployeeRegistry,
    Settlement,
    SettlementEngine,
    SettlementPass,
    SkippedEmployee,
    TriggerAdapter,
    UpkeepCheck,
    VaultAccountant,
    evaluate,
    is_due,
)
from payroll_vault.ledger.store import EmployeeRecord, LedgerStore

__all__ = [
    # Facade
    "Payroll",
    # Store
    "LedgerStore",
    "EmployeeRecord",
    # Auth
    "NULL_ADDRESS",
    "Authorizer",
    "CallerContext",
    "normalize_address",
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    # Config
    "LedgerConfig",
    "validate_production_config",
    # Services
    "Eligibility",
    "EligibilityReason",
    "EmployeeRegistry",
    "Settlement",
    "SettlementEngine",
    "SettlementPass",
    "SkippedEmployee",
    "TriggerAdapter",
    "UpkeepCheck",
    "VaultAccountant",
    "evaluate",
    "is_due",
    # Errors
    "PayrollError",
    "AlreadyActive",
    "InsufficientFunds",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidFrequency",
    "LedgerAlreadyInitialized",
    "LedgerNotInitialized",
    "NotActive",
    "NothingDue",
    "ReentrantCall",
    "TooEarly",
    "Unauthorized",
    "ZeroAmount",
]
