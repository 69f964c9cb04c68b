"""Injection execution.

The executor is the only writer of per-recipient schedule progress. It
assumes it runs inside a transaction owned by the caller: on a deposit
failure it raises and relies on the surrounding rollback to undo the
approvals, transfers and schedule updates made earlier in the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from injector.addresses import is_address
from injector.chain.base import Chain
from injector.clock import Clock
from injector.errors import InvalidInputError, RecipientDepositFailedError
from injector.events import EventLog, EventType
from injector.scheduling.readiness import ReadinessEvaluator
from injector.scheduling.registry import ScheduleRegistry
from injector.scheduling.types import InjectorSettings

logger = logging.getLogger(__name__)


class InjectionExecutor:
    """Re-validates candidates and disburses to the ones still eligible."""

    def __init__(
        self,
        registry: ScheduleRegistry,
        evaluator: ReadinessEvaluator,
        chain: Chain,
        settings: InjectorSettings,
        events: EventLog,
        *,
        injector_address: str,
        clock: Clock,
    ):
        self._registry = registry
        self._evaluator = evaluator
        self._chain = chain
        self._settings = settings
        self._events = events
        self._injector_address = injector_address.lower()
        self._clock = clock

    def inject(self, candidates: Sequence[str]) -> list[str]:
        """Inject every candidate that passes re-validation.

        Candidates are processed in the given order. Ineligible candidates
        are skipped. The first failing deposit aborts the batch.

        Returns:
            Addresses that received a deposit, in order.

        Raises:
            InvalidInputError: A candidate is not a well-formed address.
            RecipientDepositFailedError: A recipient rejected its deposit.
        """
        for candidate in candidates:
            if not is_address(candidate):
                raise InvalidInputError(f"Invalid candidate address: {candidate!r}")

        now = self._clock.now()
        token_address = self._settings.inject_token
        token = self._chain.token(token_address)
        injected: list[str] = []

        for candidate in candidates:
            address = candidate.lower()
            entry = self._registry.get_account_info(address)
            available = token.balance_of(self._injector_address)
            reasons = self._evaluator.check(address, entry, available, now)
            if reasons:
                logger.info(
                    "injection_skipped",
                    extra={
                        "gauge.address": address,
                        "injection.reasons": [r.value for r in reasons],
                    },
                )
                continue

            amount = entry.amount_per_period
            token.approve(self._injector_address, address, amount)
            try:
                self._chain.gauge(address).deposit_reward_token(
                    self._injector_address, token_address, amount
                )
            except Exception as e:
                logger.error(
                    "injection_failed",
                    extra={
                        "gauge.address": address,
                        "injection.amount": amount,
                        "error.message": str(e),
                    },
                )
                self._events.emit(
                    EventType.INJECTION_FAILED,
                    gauge=address,
                    amount=amount,
                    reason=str(e),
                )
                raise RecipientDepositFailedError(address, str(e)) from e

            updated = self._registry.record_injection(address, now)
            self._events.emit(
                EventType.EMISSIONS_INJECTION,
                gauge=address,
                amount=amount,
                period_number=updated.period_number,
            )
            injected.append(address)

        logger.info(
            "injection_batch_complete",
            extra={
                "injection.candidates": len(candidates),
                "injection.injected": len(injected),
            },
        )
        return injected
