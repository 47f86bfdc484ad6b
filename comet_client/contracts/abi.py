"""Minimal ABI function descriptions built on eth-abi."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector


@dataclass(frozen=True)
class ContractFunction:
    """One contract function: canonical input and output ABI types."""

    name: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_call(self, *args: Any) -> str:
        """Return ``0x``-prefixed calldata for ``args``."""
        if len(args) != len(self.inputs):
            raise TypeError(
                f"{self.signature} takes {len(self.inputs)} arguments, got {len(args)}"
            )
        return encode_hex(self.selector + encode(list(self.inputs), list(args)))

    def decode_output(self, data: str | bytes) -> Any:
        """Decode return data; a single output is returned unwrapped."""
        raw = decode_hex(data) if isinstance(data, str) else data
        values = decode(list(self.outputs), raw)
        if len(self.outputs) == 1:
            return values[0]
        return values
