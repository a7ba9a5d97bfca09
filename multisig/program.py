"""The multisig program: account storage and its instruction entry points."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable
from typing import TypeVar

from multisig import instructions
from multisig.instructions import (
    Invoke,
    MultisigInitialized,
    TransactionApproved,
    TransactionCancelled,
    TransactionCreated,
    TransactionEdited,
    TransactionExecuted,
    TransactionRevoked,
)
from multisig.state import Multisig, Pubkey, Transaction, TransactionAccount

ANCHOR_DISCRIMINATOR_SIZE = 8

_E = TypeVar("_E")
_A = TypeVar("_A")


class MultisigProgram:
    """Holds multisig and transaction accounts and applies instructions atomically.

    Each instruction works on copies of the accounts it touches; they are
    stored back only when the instruction succeeds.
    """

    def __init__(self, program_id: Pubkey, invoke: Invoke) -> None:
        self.program_id = program_id
        self._invoke = invoke
        self.multisigs: dict[Pubkey, Multisig] = {}
        self.transactions: dict[Pubkey, Transaction] = {}
        self.events: list[object] = []

    @staticmethod
    def _load(store: dict[Pubkey, _A], key: Pubkey, kind: str) -> _A:
        try:
            return copy.deepcopy(store[key])
        except KeyError:
            raise KeyError(f"{kind} account {key} is not initialized") from None

    def _ensure_unused(self, key: Pubkey) -> None:
        if key in self.multisigs or key in self.transactions:
            raise ValueError(f"account {key} is already in use")

    def _emit(self, event: _E) -> _E:
        self.events.append(event)
        return event

    def _on_transaction(
        self,
        multisig_key: Pubkey,
        transaction_key: Pubkey,
        handler: Callable[[Multisig, Transaction], _E],
        close: bool = False,
    ) -> _E:
        multisig = self._load(self.multisigs, multisig_key, "multisig")
        transaction = self._load(self.transactions, transaction_key, "transaction")
        event = handler(multisig, transaction)
        if close:
            del self.transactions[transaction_key]
        else:
            self.transactions[transaction_key] = transaction
        return self._emit(event)

    def initialize_multisig(
        self,
        multisig_key: Pubkey,
        owners: Iterable[Pubkey],
        threshold: int,
        bump: int,
    ) -> MultisigInitialized:
        """Create a multisig account at an unused address."""
        self._ensure_unused(multisig_key)
        multisig = Multisig(key=multisig_key)
        event = instructions.init_multisig(multisig, owners, threshold, bump)
        self.multisigs[multisig_key] = multisig
        return self._emit(event)

    def create_tx(
        self,
        multisig_key: Pubkey,
        transaction_key: Pubkey,
        proposer: Pubkey,
        pid: Pubkey,
        data: bytes,
        accs: Iterable[TransactionAccount],
    ) -> TransactionCreated:
        """Propose a transaction at an unused address."""
        multisig = self._load(self.multisigs, multisig_key, "multisig")
        self._ensure_unused(transaction_key)
        transaction, event = instructions.init_transaction(
            self.program_id, multisig, transaction_key, pid, accs, data, proposer
        )
        self.transactions[transaction_key] = transaction
        return self._emit(event)

    def execute_tx(
        self, multisig_key: Pubkey, transaction_key: Pubkey, multisig_signer: Pubkey
    ) -> TransactionExecuted:
        """Execute an approved transaction."""
        return self._on_transaction(
            multisig_key,
            transaction_key,
            lambda ms, tx: instructions.execute_transaction(
                self.program_id, ms, tx, multisig_signer, self._invoke
            ),
        )

    def edit_tx(
        self,
        multisig_key: Pubkey,
        transaction_key: Pubkey,
        proposer: Pubkey,
        data: bytes,
        accs: Iterable[TransactionAccount],
    ) -> TransactionEdited:
        """Replace the accounts and data of a transaction."""
        return self._on_transaction(
            multisig_key,
            transaction_key,
            lambda ms, tx: instructions.edit_transaction(
                self.program_id, ms, tx, accs, data, proposer
            ),
        )

    def cancel_tx(
        self, multisig_key: Pubkey, transaction_key: Pubkey, proposer: Pubkey
    ) -> TransactionCancelled:
        """Cancel a transaction and close its account."""
        return self._on_transaction(
            multisig_key,
            transaction_key,
            lambda ms, tx: instructions.cancel_transaction(
                self.program_id, ms, tx, proposer
            ),
            close=True,
        )

    def revoke_approval(
        self, multisig_key: Pubkey, transaction_key: Pubkey, proposer: Pubkey
    ) -> TransactionRevoked:
        """Withdraw an owner's approval."""
        return self._on_transaction(
            multisig_key,
            transaction_key,
            lambda ms, tx: instructions.revoke_approval(ms, tx, proposer),
        )

    def approve(
        self, multisig_key: Pubkey, transaction_key: Pubkey, proposer: Pubkey
    ) -> TransactionApproved:
        """Record an owner's approval."""
        return self._on_transaction(
            multisig_key,
            transaction_key,
            lambda ms, tx: instructions.approve_transaction(
                self.program_id, ms, tx, proposer
            ),
        )