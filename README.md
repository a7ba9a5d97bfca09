# multisig

This is a small model of an M-of-N multisignature wallet with no dependencies.
A group of owners shares one multisig account that has an approval threshold.
Any owner may propose a transaction. A transaction is an instruction for a
target program, made of an account list and opaque data. Other owners approve
it. When the number of approvals reaches the threshold, the transaction can be
executed once.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Concepts

- `multisig.state.Pubkey` is a 32-byte account key. `Pubkey.new_unique()`
  returns a key that differs from every other key made by that method.
- `multisig.state.Multisig` holds the owner list (`owners`), the approval
  `threshold` and the signer `bump`, which must fit in one byte.
- `multisig.state.Transaction` is a proposed instruction. It records:
  - the target `program_id`;
  - its `accounts`, a list of `TransactionAccount`;
  - its `data`;
  - one approval flag per owner, in `signers`;
  - whether it has run, in `did_execute`.

  It is limited to 25 accounts and 1024 bytes of data. A multisig is limited
  to 50 owners. Going over any of these limits raises `ValueError`.
- `multisig.errors.MultisigError` is raised when a rule is broken. Its `code`
  is a member of `multisig.errors.ErrorCode`:
  - `INVALID_THRESHOLD`: the threshold is out of range, or the owner list
    contains a duplicate.
  - `INVALID_OWNER`: the caller is not an owner, or is not the proposer of
    the transaction. It is also raised when a new owner list is shorter than
    the threshold.
  - `INSUFFICIENT_SIGNERS`: there are too few approvals.
  - `TRANSACTION_ALREADY_EXECUTED`: the transaction has already been executed.
  - `INVALID_TRANSACTION_DETAILS`: an edit has empty accounts or empty data.

## Usage

`multisig.program.MultisigProgram` keeps multisig and transaction accounts in
dictionaries keyed by `Pubkey`. Each entry point returns the event it emits and
also appends that event to `program.events`.

An instruction works on copies of the accounts it touches. Those copies are
stored back only if the instruction succeeds, so a failed call leaves every
account unchanged.

```python
from multisig.program import MultisigProgram
from multisig.state import Pubkey, TransactionAccount

calls = []

def invoke(instruction, signer_seeds):
    # Receives the formatted instruction and the signer seeds.
    calls.append((instruction, signer_seeds))

program = MultisigProgram(Pubkey.new_unique(), invoke)

alice, bob, carol = (Pubkey.new_unique() for _ in range(3))
wallet = Pubkey.new_unique()
program.initialize_multisig(wallet, [alice, bob, carol], threshold=2, bump=255)

tx_key = Pubkey.new_unique()
target = Pubkey.new_unique()
accounts = [TransactionAccount(Pubkey.new_unique(), is_signer=False, is_writable=True)]
program.create_tx(wallet, tx_key, alice, target, b"\x01\x02", accounts)

program.approve(wallet, tx_key, bob)
program.execute_tx(wallet, tx_key, multisig_signer=Pubkey.new_unique())
```

When a transaction is created, the proposer's approval is recorded with it.

When `execute_tx` runs, it calls `invoke` with two arguments:

- the instruction, in which any account equal to `multisig_signer` is marked
  as a signer;
- the seeds `(b"multisig", bytes(multisig_key), bytes([bump]))`.

The other entry points are:

- `approve`: an owner approves the transaction.
- `revoke_approval`: an owner withdraws their approval.
- `edit_tx`: the proposer replaces the accounts and data.
- `cancel_tx`: the proposer removes a transaction that has not been executed.
  The number of approvals must still meet the threshold.

The functions in `multisig.instructions` work directly on `Multisig` and
`Transaction` objects. Each one returns its event, for example
`TransactionApproved` or `TransactionExecuted`. The module also provides:

- `change_threshold`, which raises the threshold;
- `change_owners`, which replaces the owner list;
- `change_owners_and_threshold`.

`multisig.owners.assert_unique_owner` checks that an owner list has no
duplicates.

## What it does not do

This package models the wallet's rules in memory. It does not do any of the
following:

- send instructions anywhere;
- sign anything cryptographically;
- derive addresses;
- save accounts to disk.

Executing a transaction only calls the `invoke` callable that you supply. The
package provides no command-line tool.