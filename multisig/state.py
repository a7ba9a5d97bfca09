"""Account state of the multisig program: the multisig itself and its transactions."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import ClassVar

from multisig.errors import ErrorCode, MultisigError
from multisig.owners import assert_unique_owner

MAX_OWNERS = 50
MAX_ACCOUNTS = 25
MAX_DATA_LEN = 1024
MAX_SIGNERS = 25

_unique_counter = itertools.count(1)


@dataclass(frozen=True, order=True)
class Pubkey:
    """A 32-byte public key."""

    LENGTH: ClassVar[int] = 32

    value: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.value)
        if len(raw) != self.LENGTH:
            raise ValueError(f"public key must be {self.LENGTH} bytes, got {len(raw)}")
        object.__setattr__(self, "value", raw)

    @classmethod
    def new_unique(cls) -> Pubkey:
        """Return a key distinct from every other key made by this method."""
        n = next(_unique_counter)
        return cls(n.to_bytes(8, "big") + bytes(cls.LENGTH - 8))

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.value.hex()


@dataclass(frozen=True)
class AccountMeta:
    """An account reference inside an instruction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool


@dataclass
class Instruction:
    """An instruction to be invoked on another program."""

    program_id: Pubkey
    accounts: list[AccountMeta]
    data: bytes


@dataclass(frozen=True)
class TransactionAccount:
    """An account stored with a proposed transaction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool


def _check_u8(value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"bump must fit in one byte, got {value}")
    return value


@dataclass
class Multisig:
    """A group of owners and the number of approvals a transaction needs."""

    key: Pubkey
    owners: list[Pubkey] = field(default_factory=list)
    threshold: int = 0
    bump: int = 0

    def init(self, owners: list[Pubkey], threshold: int, bump: int) -> None:
        """Set the owners, threshold and bump of a fresh multisig."""
        owners = list(owners)
        assert_unique_owner(owners)
        if not 0 < threshold <= len(owners):
            raise MultisigError(ErrorCode.INVALID_THRESHOLD)
        if len(owners) > MAX_OWNERS:
            raise ValueError(f"at most {MAX_OWNERS} owners are allowed")
        self.owners = owners
        self.threshold = threshold
        self.bump = _check_u8(bump)

    def update_threshold(self, updated_threshold: int) -> None:
        """Raise the threshold; it may not drop or exceed the number of owners."""
        if updated_threshold <= self.threshold:
            raise MultisigError(ErrorCode.INVALID_THRESHOLD)
        if updated_threshold > len(self.owners):
            raise MultisigError(ErrorCode.INVALID_THRESHOLD)
        assert_unique_owner(self.owners)
        self.threshold = updated_threshold

    def set_owners(self, new_owners: list[Pubkey]) -> None:
        """Replace the owners; there must be at least as many as the threshold."""
        new_owners = list(new_owners)
        assert_unique_owner(new_owners)
        if len(new_owners) < self.threshold:
            raise MultisigError(ErrorCode.INVALID_OWNER)
        if len(new_owners) > MAX_OWNERS:
            raise ValueError(f"at most {MAX_OWNERS} owners are allowed")
        self.owners = new_owners


def _owner_index(multisig: Multisig, signer: Pubkey) -> int:
    try:
        return multisig.owners.index(signer)
    except ValueError:
        raise MultisigError(ErrorCode.INVALID_OWNER) from None


@dataclass
class Transaction:
    """A transaction proposed to a multisig, with its approvals."""

    key: Pubkey
    multisig: Pubkey
    program_id: Pubkey
    accounts: list[TransactionAccount]
    data: bytes
    signers: list[bool]
    did_execute: bool
    owner: Pubkey

    @classmethod
    def new(
        cls,
        key: Pubkey,
        multisig: Multisig,
        program_id: Pubkey,
        accounts: list[TransactionAccount],
        data: bytes,
        proposer: Pubkey,
    ) -> Transaction:
        """Create a transaction approved by its proposer, who must be an owner."""
        proposer_index = _owner_index(multisig, proposer)
        signers = [False] * len(multisig.owners)
        signers[proposer_index] = True
        accounts = list(accounts)
        data = bytes(data)
        if len(accounts) > MAX_ACCOUNTS:
            raise ValueError(f"at most {MAX_ACCOUNTS} accounts are allowed")
        if len(data) > MAX_DATA_LEN:
            raise ValueError(f"instruction data may hold at most {MAX_DATA_LEN} bytes")
        return cls(
            key=key,
            multisig=multisig.key,
            program_id=program_id,
            accounts=accounts,
            data=data,
            signers=signers,
            did_execute=False,
            owner=proposer,
        )

    def approve(self, signer: Pubkey, multisig: Multisig) -> None:
        """Record the approval of an owner."""
        self.signers[_owner_index(multisig, signer)] = True

    def validate(self, multisig: Multisig) -> None:
        """Check that the transaction is unexecuted and has enough approvals."""
        self.check_if_already_executed()
        approvals = sum(self.signers)
        if approvals < multisig.threshold:
            raise MultisigError(ErrorCode.INSUFFICIENT_SIGNERS)

    def check_if_already_executed(self) -> None:
        """Raise if the transaction has already been executed."""
        if self.did_execute:
            raise MultisigError(ErrorCode.TRANSACTION_ALREADY_EXECUTED)

    def to_instruction(self) -> Instruction:
        """Build the instruction this transaction describes."""
        return Instruction(
            program_id=self.program_id,
            accounts=[
                AccountMeta(acc.pubkey, acc.is_signer, acc.is_writable)
                for acc in self.accounts
            ],
            data=self.data,
        )

    def format_ix(self, multisig_signer: Pubkey) -> Instruction:
        """Build the instruction with the multisig signer marked as a signer."""
        ix = self.to_instruction()
        ix.accounts = [
            AccountMeta(acc.pubkey, True, acc.is_writable)
            if acc.pubkey == multisig_signer
            else acc
            for acc in ix.accounts
        ]
        return ix

    def mark_executed(self) -> None:
        """Flag the transaction as executed; it may happen only once."""
        self.check_if_already_executed()
        self.did_execute = True

    def edit(
        self, accounts: list[TransactionAccount], data: bytes, proposer: Pubkey
    ) -> None:
        """Replace accounts and data; only the proposer may do so."""
        self.check_if_already_executed()
        accounts = list(accounts)
        data = bytes(data)
        if not accounts or not data:
            raise MultisigError(ErrorCode.INVALID_TRANSACTION_DETAILS)
        if proposer != self.owner:
            raise MultisigError(ErrorCode.INVALID_OWNER)
        if len(accounts) > MAX_ACCOUNTS:
            raise ValueError(f"at most {MAX_ACCOUNTS} accounts are allowed")
        if len(data) > MAX_DATA_LEN:
            raise ValueError(f"instruction data may hold at most {MAX_DATA_LEN} bytes")
        self.accounts = accounts
        self.data = data

    def cancel(self, proposer: Pubkey) -> None:
        """Check that the proposer may cancel this unexecuted transaction."""
        self.check_if_already_executed()
        if self.owner != proposer:
            raise MultisigError(ErrorCode.INVALID_OWNER)

    def revoke_approval(self, multisig: Multisig, signer: Pubkey) -> None:
        """Withdraw an owner's approval."""
        self.signers[_owner_index(multisig, signer)] = False