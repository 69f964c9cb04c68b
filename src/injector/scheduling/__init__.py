"""Scheduling subsystem: who gets paid, when, and how much.

Public API:
- ScheduleRegistry: Recipient list and per-recipient schedule state
- ReadinessEvaluator: Read-only eligibility computation
- InjectionExecutor: Re-validating, fail-fast disbursement
- BalanceReconciler: Obligation vs. custodial balance

Types:
- ScheduleEntry: Schedule state for one recipient
- InjectorSettings: Owner-controlled runtime configuration
- ReadinessDecision / ReadinessReason: Eligibility diagnostics
"""

from injector.addresses import (
    ZERO_ADDRESS,
    is_address,
    is_zero_address,
    normalize_address,
)
from injector.scheduling.executor import InjectionExecutor
from injector.scheduling.readiness import ReadinessEvaluator
from injector.scheduling.reconciler import BalanceReconciler
from injector.scheduling.registry import ScheduleRegistry
from injector.scheduling.types import (
    InjectorSettings,
    ReadinessDecision,
    ReadinessReason,
    ScheduleEntry,
)

__all__ = [
    "ZERO_ADDRESS",
    "BalanceReconciler",
    "InjectionExecutor",
    "InjectorSettings",
    "ReadinessDecision",
    "ReadinessEvaluator",
    "ReadinessReason",
    "ScheduleEntry",
    "ScheduleRegistry",
    "is_address",
    "is_zero_address",
    "normalize_address",
]
