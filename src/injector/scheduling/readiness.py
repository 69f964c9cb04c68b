"""Read-only readiness computation."""

from __future__ import annotations

import logging

from injector.chain.base import AssetLedger, Chain
from injector.clock import Clock
from injector.scheduling.registry import ScheduleRegistry
from injector.scheduling.types import (
    InjectorSettings,
    ReadinessDecision,
    ReadinessReason,
    ScheduleEntry,
)

logger = logging.getLogger(__name__)


class ReadinessEvaluator:
    """Decides which recipients may receive an injection right now.

    Never mutates anything. The same per-recipient check is reused by the
    executor to re-validate candidates at execution time.
    """

    def __init__(
        self,
        registry: ScheduleRegistry,
        chain: Chain,
        settings: InjectorSettings,
        *,
        injector_address: str,
        clock: Clock,
    ):
        self._registry = registry
        self._chain = chain
        self._settings = settings
        self._injector_address = injector_address.lower()
        self._clock = clock

    @property
    def token(self) -> AssetLedger:
        return self._chain.token(self._settings.inject_token)

    def balance(self) -> int:
        return self.token.balance_of(self._injector_address)

    def check(
        self, address: str, entry: ScheduleEntry, available: int, now: int
    ) -> list[ReadinessReason]:
        """Return every reason `address` is blocked; empty means eligible."""
        if not entry.is_active:
            return [ReadinessReason.INACTIVE]

        reasons: list[ReadinessReason] = []
        if now - entry.last_injection_timestamp < self._settings.min_wait_period_seconds:
            reasons.append(ReadinessReason.WAIT_PERIOD)

        reward = self._chain.gauge(address).reward_data(self._settings.inject_token)
        if reward.period_finish > now:
            reasons.append(ReadinessReason.REWARD_PERIOD_ACTIVE)
        if available < entry.amount_per_period:
            reasons.append(ReadinessReason.INSUFFICIENT_BALANCE)
        if entry.period_number >= entry.max_periods:
            reasons.append(ReadinessReason.PERIODS_EXHAUSTED)
        if reward.distributor.lower() != self._injector_address:
            reasons.append(ReadinessReason.NOT_DISTRIBUTOR)
        return reasons

    def explain(self) -> list[ReadinessDecision]:
        """Evaluate the watch list, keeping the reasons for every recipient.

        A running balance starts at the real balance and is reduced by each
        eligible recipient's amount, so the ready set is always fundable as
        a whole.
        """
        now = self._clock.now()
        available = self.balance()
        decisions: list[ReadinessDecision] = []
        for address, entry in self._registry.iter_active():
            reasons = self.check(address, entry, available, now)
            ready = not reasons
            if ready:
                available -= entry.amount_per_period
            decisions.append(
                ReadinessDecision(
                    address=address,
                    ready=ready,
                    reasons=reasons,
                    amount_per_period=entry.amount_per_period,
                )
            )
        return decisions

    def get_ready_gauges(self) -> list[str]:
        ready = [d.address for d in self.explain() if d.ready]
        logger.debug(
            "readiness_checked",
            extra={
                "schedule.recipient_count": len(self._registry),
                "readiness.ready_count": len(ready),
            },
        )
        return ready
