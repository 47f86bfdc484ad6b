"""Operation boundary: argument validation and uniform result reporting."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from eth_utils import is_address, to_checksum_address

from .errors import CometClientError, InvalidAmount, MissingArgument, UpstreamFailure
from .models import OperationResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def require_address(value: str | None, argument: str) -> str:
    """Return ``value`` checksummed; MissingArgument when absent or malformed."""
    if not value or not is_address(value):
        raise MissingArgument(argument)
    return to_checksum_address(value)


def require_positive_amount(value: int | None, argument: str = "amount") -> int:
    if value is None:
        raise MissingArgument(argument)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidAmount(argument, value)
    return value


def require_non_negative_index(value: int | None, argument: str = "index") -> int:
    if value is None:
        raise MissingArgument(argument)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAmount(argument, value)
    return value


def require_uint8(value: int | None, argument: str) -> int:
    value = require_non_negative_index(value, argument)
    if value > 0xFF:
        raise InvalidAmount(argument, value)
    return value


def require_bytes32(value: bytes | None, argument: str) -> bytes:
    """Signature components are exactly 32 raw bytes."""
    if value is None:
        raise MissingArgument(argument)
    if not isinstance(value, (bytes, bytearray)) or len(value) != 32:
        raise InvalidAmount(argument, value)
    return bytes(value)


async def run_operation(
    name: str, operation: Callable[[], Awaitable[T]]
) -> OperationResult[T]:
    """Await ``operation`` and turn its outcome into an OperationResult.

    Client errors are reported unchanged; anything raised by the transport or
    the decoder becomes UpstreamFailure with the original message.
    """
    try:
        value = await operation()
    except (MissingArgument, InvalidAmount) as e:
        logger.debug("%s rejected: %s", name, e)
        return OperationResult.failure(e)
    except CometClientError as e:
        logger.warning("%s failed: %s", name, e)
        return OperationResult.failure(e)
    except Exception as e:
        failure = UpstreamFailure(e)
        failure.__cause__ = e
        logger.warning("%s failed upstream: %s", name, failure)
        return OperationResult.failure(failure)
    return OperationResult.success(value)
