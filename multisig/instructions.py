"""Instruction handlers of the multisig program and the events they emit."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from multisig.errors import SEED, ErrorCode, MultisigError
from multisig.owners import assert_unique_owner
from multisig.state import (
    Instruction,
    Multisig,
    Pubkey,
    Transaction,
    TransactionAccount,
)

Invoke = Callable[[Instruction, tuple[bytes, ...]], object]
"""Callable that runs an instruction signed with the given PDA seeds."""


@dataclass(frozen=True)
class MultisigInitialized:
    """Emitted when a multisig is set up."""

    multisig: Pubkey
    owners: tuple[Pubkey, ...]
    threshold: int
    bump: int


@dataclass(frozen=True)
class TransactionCreated:
    """Emitted when a transaction is proposed."""

    multisig: Pubkey
    program_id: Pubkey
    accounts: tuple[TransactionAccount, ...]
    data: bytes
    signers: tuple[bool, ...]


@dataclass(frozen=True)
class TransactionApproved:
    """Emitted when an owner approves a transaction."""

    multisig: Pubkey
    transaction: Pubkey
    program_id: Pubkey
    approver: Pubkey


@dataclass(frozen=True)
class _TransactionSnapshot:
    """Event carrying the full contents of a transaction."""

    multisig: Pubkey
    transaction: Pubkey
    program_id: Pubkey
    accounts: tuple[TransactionAccount, ...]
    data: bytes
    signers: tuple[bool, ...]

    @classmethod
    def of(cls, program_id: Pubkey, multisig: Multisig, transaction: Transaction):
        return cls(
            multisig=multisig.key,
            transaction=transaction.key,
            program_id=program_id,
            accounts=tuple(transaction.accounts),
            data=transaction.data,
            signers=tuple(transaction.signers),
        )


@dataclass(frozen=True)
class TransactionExecuted(_TransactionSnapshot):
    """Emitted when a transaction has been executed."""


@dataclass(frozen=True)
class TransactionEdited(_TransactionSnapshot):
    """Emitted when the proposer edits a transaction."""


@dataclass(frozen=True)
class TransactionCancelled:
    """Emitted when a transaction is cancelled and closed."""

    multisig: Pubkey
    transaction: Pubkey
    program_id: Pubkey


@dataclass(frozen=True)
class TransactionRevoked:
    """Emitted when an owner withdraws an approval."""

    multisig: Pubkey
    transaction: Pubkey
    proposer: Pubkey


@dataclass(frozen=True)
class AuthEvent:
    """Event for operations authorised by the multisig signer itself."""

    multisig: Pubkey
    program_id: Pubkey


def _require_owner(multisig: Multisig, key: Pubkey) -> None:
    if key not in multisig.owners:
        raise MultisigError(ErrorCode.INVALID_OWNER)


def signer_seeds(multisig: Multisig) -> tuple[bytes, ...]:
    """Seeds with which the multisig signer address signs."""
    return (SEED.encode(), bytes(multisig.key), bytes([multisig.bump]))


def init_multisig(
    multisig: Multisig, owners: Iterable[Pubkey], threshold: int, bump: int
) -> MultisigInitialized:
    """Set up a fresh multisig account."""
    multisig.init(list(owners), threshold, bump)
    return MultisigInitialized(
        multisig=multisig.key,
        owners=tuple(multisig.owners),
        threshold=multisig.threshold,
        bump=multisig.bump,
    )


def init_transaction(
    program_id: Pubkey,
    multisig: Multisig,
    transaction_key: Pubkey,
    pid: Pubkey,
    accounts: Iterable[TransactionAccount],
    data: bytes,
    proposer: Pubkey,
) -> tuple[Transaction, TransactionCreated]:
    """Propose a transaction; the proposer must be an owner."""
    _require_owner(multisig, proposer)
    transaction = Transaction.new(
        transaction_key, multisig, pid, list(accounts), data, proposer
    )
    event = TransactionCreated(
        multisig=multisig.key,
        program_id=program_id,
        accounts=tuple(transaction.accounts),
        data=transaction.data,
        signers=tuple(transaction.signers),
    )
    return transaction, event


def approve_transaction(
    program_id: Pubkey, multisig: Multisig, transaction: Transaction, proposer: Pubkey
) -> TransactionApproved:
    """Record an owner's approval of a transaction of this multisig."""
    if transaction.multisig != multisig.key:
        raise ValueError("transaction does not belong to this multisig")
    _require_owner(multisig, proposer)
    transaction.approve(proposer, multisig)
    return TransactionApproved(
        multisig=multisig.key,
        transaction=transaction.key,
        program_id=program_id,
        approver=proposer,
    )


def execute_transaction(
    program_id: Pubkey,
    multisig: Multisig,
    transaction: Transaction,
    multisig_signer: Pubkey,
    invoke: Invoke,
) -> TransactionExecuted:
    """Invoke an approved transaction, signed by the multisig signer, once."""
    if transaction.did_execute:
        raise MultisigError(ErrorCode.TRANSACTION_ALREADY_EXECUTED)
    transaction.validate(multisig)
    transaction.check_if_already_executed()
    invoke(transaction.format_ix(multisig_signer), signer_seeds(multisig))
    transaction.mark_executed()
    return TransactionExecuted.of(program_id, multisig, transaction)


def edit_transaction(
    program_id: Pubkey,
    multisig: Multisig,
    transaction: Transaction,
    accounts: Iterable[TransactionAccount],
    data: bytes,
    proposer: Pubkey,
) -> TransactionEdited:
    """Replace the accounts and data of an unexecuted transaction."""
    _require_owner(multisig, proposer)
    transaction.check_if_already_executed()
    transaction.edit(list(accounts), data, proposer)
    return TransactionEdited.of(program_id, multisig, transaction)


def cancel_transaction(
    program_id: Pubkey, multisig: Multisig, transaction: Transaction, proposer: Pubkey
) -> TransactionCancelled:
    """Check that the proposer may cancel the transaction and report it."""
    transaction.check_if_already_executed()
    transaction.validate(multisig)
    transaction.cancel(proposer)
    return TransactionCancelled(multisig.key, transaction.key, program_id)


def revoke_approval(
    multisig: Multisig, transaction: Transaction, proposer: Pubkey
) -> TransactionRevoked:
    """Withdraw an owner's approval of an unexecuted transaction."""
    _require_owner(multisig, proposer)
    transaction.check_if_already_executed()
    transaction.revoke_approval(multisig, proposer)
    return TransactionRevoked(multisig.key, transaction.key, proposer)


def change_threshold(multisig: Multisig, new_threshold: int) -> None:
    """Raise the threshold of a multisig."""
    multisig.update_threshold(new_threshold)


def change_owners(multisig: Multisig, new_owners: Iterable[Pubkey]) -> None:
    """Replace the owners of a multisig."""
    multisig.set_owners(list(new_owners))


def change_owners_and_threshold(
    multisig: Multisig, new_owners: Iterable[Pubkey], new_threshold: int
) -> None:
    """Change the threshold, then the owners, of a multisig."""
    new_owners = list(new_owners)
    assert_unique_owner(new_owners)
    if not (new_threshold > 0 and new_threshold > len(new_owners)):
        raise MultisigError(ErrorCode.INVALID_THRESHOLD)
    change_threshold(multisig, new_threshold)
    change_owners(multisig, new_owners)