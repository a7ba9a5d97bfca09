"""Error codes raised by the multisig program, and the PDA seed it uses."""

from __future__ import annotations

import enum

SEED = "multisig"
"""Seed prefix used to derive the multisig signer address."""


class ErrorCode(enum.IntEnum):
    """Program error codes, numbered from the custom-error base of 6000."""

    INVALID_THRESHOLD = 6000
    INVALID_OWNER = 6001
    INSUFFICIENT_SIGNERS = 6002
    TRANSACTION_ALREADY_EXECUTED = 6003
    INVALID_TRANSACTION_DETAILS = 6004

    @property
    def message(self) -> str:
        """Human-readable description of the error."""
        return _MESSAGES[self]


_MESSAGES = {
    ErrorCode.INVALID_THRESHOLD: (
        "Threshold must be greater than zero and less than or equal to number of owners"
    ),
    ErrorCode.INVALID_OWNER: "The owner is not part of the multisig group",
    ErrorCode.INSUFFICIENT_SIGNERS: "Not enough owners signed this transaction.",
    ErrorCode.TRANSACTION_ALREADY_EXECUTED: "Transaction is already executed",
    ErrorCode.INVALID_TRANSACTION_DETAILS: "Transaction details provided are invalid",
}


class MultisigError(Exception):
    """Raised when a multisig operation is rejected."""

    def __init__(self, code: ErrorCode) -> None:
        super().__init__(code.message)
        self.code = ErrorCode(code)

    def __repr__(self) -> str:
        return f"MultisigError({self.code.name})"