"""Error taxonomy for client operations and fixed-point conversions."""
from __future__ import annotations


class CometClientError(Exception):
    """Base class for errors reported by client operations."""


class NotInitialized(CometClientError):
    """No ledger address has been resolved for the client."""

    def __init__(self, message: str = "Client not initialized: no ledger address resolved") -> None:
        super().__init__(message)


class MissingArgument(CometClientError):
    """A required address or amount was omitted by the caller."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"Missing required argument: {argument}")


class InvalidAmount(CometClientError):
    """A non-positive amount was given where a positive one is required."""

    def __init__(self, argument: str, value: object) -> None:
        self.argument = argument
        self.value = value
        super().__init__(f"Invalid amount for {argument}: {value!r}")


class ContractUnavailable(CometClientError):
    """The contract handle could not be constructed."""


class StaleResponse(CometClientError):
    """A response arrived after the client switched to other endpoints."""

    def __init__(self, ledger_address: str | None) -> None:
        self.ledger_address = ledger_address
        super().__init__(f"Discarded response for superseded ledger {ledger_address}")


class UpstreamFailure(CometClientError):
    """The external read/write rejected or the network call failed.

    The message is the original error's message, unchanged.
    """

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


# ---------------------------------------------------------------------------
# Fixed-point conversion errors
# ---------------------------------------------------------------------------


class NumericError(ValueError):
    """Base class for fixed-point conversion errors."""


class InvalidScale(NumericError):
    def __init__(self, scale: object) -> None:
        self.scale = scale
        super().__init__(f"Scale must be a positive integer power of ten, got {scale!r}")


class Overflow(NumericError):
    def __init__(self, value: object, bits: int, signed: bool) -> None:
        kind = "int" if signed else "uint"
        super().__init__(f"{value} does not fit in {kind}{bits}")


class PrecisionLoss(NumericError):
    def __init__(self, value: object, scale: int) -> None:
        super().__init__(f"{value} has more fractional digits than scale {scale} allows")
