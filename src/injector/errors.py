"""Error taxonomy for the gauge injector.

Every public entrypoint raises a subclass of InjectorError. A raised error
always means the call had no effect: the transaction boundary in
GaugeInjector restores all state before the error propagates.
"""


class InjectorError(Exception):
    """Base class for all injector failures."""


class InvalidInputError(InjectorError):
    """Length mismatch, null address, zero amount or out-of-range value."""


class DuplicateAddressError(InjectorError):
    """The same recipient appears more than once in a schedule."""

    def __init__(self, address: str):
        super().__init__(f"Duplicate recipient address: {address}")
        self.address = address


class PeriodsNotFinishedError(InjectorError):
    """A currently scheduled recipient still has periods remaining."""

    def __init__(self, address: str, period_number: int, max_periods: int):
        super().__init__(
            f"Recipient {address} has not finished its periods "
            f"({period_number}/{max_periods})"
        )
        self.address = address
        self.period_number = period_number
        self.max_periods = max_periods


class BalanceMismatchError(InjectorError):
    """Outstanding obligation does not exactly equal the custodial balance."""

    def __init__(self, obligation: int, balance: int):
        super().__init__(
            f"Schedule obligation {obligation} does not match balance {balance}"
        )
        self.obligation = obligation
        self.balance = balance


class CallerNotAuthorizedError(InjectorError):
    """The caller does not hold the role required by the entrypoint."""

    def __init__(self, caller: str, role: str):
        super().__init__(f"Caller {caller} is not the {role}")
        self.caller = caller
        self.role = role


class RecipientDepositFailedError(InjectorError):
    """A recipient rejected its deposit; the whole batch was aborted."""

    def __init__(self, address: str, reason: str):
        super().__init__(f"Deposit into {address} failed: {reason}")
        self.address = address
        self.reason = reason


class ZeroAddressRecipientError(InjectorError):
    """A withdrawal or sweep targeted the null address."""


class InjectorPausedError(InjectorError):
    """Disbursement entrypoints are disabled while the injector is paused."""


class LedgerError(Exception):
    """Raised by ledger and gauge implementations on rejected operations."""
