import pytest

from multisig.errors import ErrorCode, MultisigError
from multisig.instructions import (
    MultisigInitialized,
    TransactionCancelled,
    TransactionRevoked,
    approve_transaction,
    cancel_transaction,
    change_owners,
    change_owners_and_threshold,
    change_threshold,
    edit_transaction,
    execute_transaction,
    init_multisig,
    init_transaction,
    revoke_approval,
)
from multisig.state import Multisig, Pubkey, TransactionAccount


def _noop(ix, seeds):
    return None


@pytest.fixture
def program_id():
    return Pubkey.new_unique()


@pytest.fixture
def owners():
    return [Pubkey.new_unique() for _ in range(3)]


@pytest.fixture
def multisig(owners):
    ms = Multisig(key=Pubkey.new_unique())
    init_multisig(ms, owners, 2, 254)
    return ms


@pytest.fixture
def signer():
    return Pubkey.new_unique()


@pytest.fixture
def accounts(signer):
    return [
        TransactionAccount(signer, False, True),
        TransactionAccount(Pubkey.new_unique(), False, False),
    ]


def _propose(program_id, multisig, accounts, proposer, data=b"\x01\x02"):
    return init_transaction(
        program_id, multisig, Pubkey.new_unique(), Pubkey.new_unique(),
        accounts, data, proposer,
    )


@pytest.fixture
def transaction(program_id, multisig, owners, accounts):
    return _propose(program_id, multisig, accounts, owners[0])[0]


@pytest.fixture
def approved(program_id, multisig, transaction, owners):
    approve_transaction(program_id, multisig, transaction, owners[1])
    return transaction


def test_init_multisig_event(owners):
    ms = Multisig(key=Pubkey.new_unique())
    event = init_multisig(ms, owners, 2, 7)
    assert event == MultisigInitialized(ms.key, tuple(owners), 2, 7)
    assert ms.owners == owners


@pytest.mark.parametrize(
    "extra, threshold", [([], 0), ([], 4), ([0], 1)], ids=["zero", "too-high", "dup"]
)
def test_init_multisig_rejected(owners, extra, threshold):
    ms = Multisig(key=Pubkey.new_unique())
    with pytest.raises(MultisigError) as excinfo:
        init_multisig(ms, owners + [owners[i] for i in extra], threshold, 0)
    assert excinfo.value.code is ErrorCode.INVALID_THRESHOLD


def test_init_transaction(program_id, multisig, owners, accounts):
    tx, event = _propose(program_id, multisig, accounts, owners[1], b"ab")
    assert tx.signers == [False, True, False]
    assert event.signers == tuple(tx.signers)
    assert event.program_id == program_id
    assert event.multisig == multisig.key
    assert event.accounts == tuple(accounts)


def test_init_transaction_non_owner(program_id, multisig, accounts):
    with pytest.raises(MultisigError) as excinfo:
        _propose(program_id, multisig, accounts, Pubkey.new_unique(), b"ab")
    assert excinfo.value.code is ErrorCode.INVALID_OWNER


def test_approve(program_id, multisig, transaction, owners):
    event = approve_transaction(program_id, multisig, transaction, owners[2])
    assert transaction.signers == [True, False, True]
    assert event.approver == owners[2]
    assert event.transaction == transaction.key


def test_approve_non_owner(program_id, multisig, transaction):
    with pytest.raises(MultisigError) as excinfo:
        approve_transaction(program_id, multisig, transaction, Pubkey.new_unique())
    assert excinfo.value.code is ErrorCode.INVALID_OWNER
    assert transaction.signers == [True, False, False]


def test_approve_wrong_multisig(program_id, owners, transaction):
    other = Multisig(key=Pubkey.new_unique())
    init_multisig(other, owners, 1, 0)
    with pytest.raises(ValueError):
        approve_transaction(program_id, other, transaction, owners[1])
    assert transaction.signers == [True, False, False]


def test_execute_insufficient_signers(program_id, multisig, transaction, signer):
    calls = []
    with pytest.raises(MultisigError) as excinfo:
        execute_transaction(
            program_id, multisig, transaction, signer,
            lambda ix, seeds: calls.append(ix),
        )
    assert excinfo.value.code is ErrorCode.INSUFFICIENT_SIGNERS
    assert calls == []
    assert transaction.did_execute is False


def test_execute_success(program_id, multisig, approved, signer):
    calls = []
    event = execute_transaction(
        program_id, multisig, approved, signer,
        lambda ix, seeds: calls.append((ix, seeds)),
    )
    assert len(calls) == 1
    ix, seeds = calls[0]
    assert seeds == (b"multisig", bytes(multisig.key), bytes([254]))
    assert ix.program_id == approved.program_id
    assert ix.accounts[0].pubkey == signer and ix.accounts[0].is_signer
    assert not ix.accounts[1].is_signer
    assert ix.data == b"\x01\x02"
    assert approved.did_execute is True
    assert event.signers == (True, True, False)


def test_execute_twice(program_id, multisig, approved, signer):
    execute_transaction(program_id, multisig, approved, signer, _noop)
    calls = []
    with pytest.raises(MultisigError) as excinfo:
        execute_transaction(
            program_id, multisig, approved, signer,
            lambda ix, seeds: calls.append(ix),
        )
    assert excinfo.value.code is ErrorCode.TRANSACTION_ALREADY_EXECUTED
    assert calls == []
    assert approved.did_execute is True


def test_execute_invoke_failure(program_id, multisig, approved, signer):
    def failing(ix, seeds):
        raise RuntimeError("inner instruction failed")

    with pytest.raises(RuntimeError):
        execute_transaction(program_id, multisig, approved, signer, failing)
    assert approved.did_execute is False


def test_edit_by_proposer(program_id, multisig, transaction, owners):
    new_accounts = [TransactionAccount(Pubkey.new_unique(), True, True)]
    event = edit_transaction(
        program_id, multisig, transaction, new_accounts, b"zz", owners[0]
    )
    assert transaction.accounts == new_accounts
    assert transaction.data == b"zz"
    assert event.data == b"zz"
    assert event.accounts == tuple(new_accounts)


@pytest.mark.parametrize("who", [1, None], ids=["other-owner", "stranger"])
def test_edit_by_non_proposer(program_id, multisig, transaction, owners, accounts, who):
    editor = owners[who] if who is not None else Pubkey.new_unique()
    with pytest.raises(MultisigError) as excinfo:
        edit_transaction(program_id, multisig, transaction, accounts, b"x", editor)
    assert excinfo.value.code is ErrorCode.INVALID_OWNER
    assert transaction.data == b"\x01\x02"


def test_edit_empty_data(program_id, multisig, transaction, owners, accounts):
    with pytest.raises(MultisigError) as excinfo:
        edit_transaction(program_id, multisig, transaction, accounts, b"", owners[0])
    assert excinfo.value.code is ErrorCode.INVALID_TRANSACTION_DETAILS
    assert transaction.data == b"\x01\x02"


def test_cancel_needs_threshold(program_id, multisig, transaction, owners):
    with pytest.raises(MultisigError) as excinfo:
        cancel_transaction(program_id, multisig, transaction, owners[0])
    assert excinfo.value.code is ErrorCode.INSUFFICIENT_SIGNERS


def test_cancel_by_non_proposer(program_id, multisig, approved, owners):
    with pytest.raises(MultisigError) as excinfo:
        cancel_transaction(program_id, multisig, approved, owners[1])
    assert excinfo.value.code is ErrorCode.INVALID_OWNER


def test_cancel_success(program_id, multisig, approved, owners):
    event = cancel_transaction(program_id, multisig, approved, owners[0])
    assert event == TransactionCancelled(multisig.key, approved.key, program_id)


def test_revoke(multisig, approved, owners):
    event = revoke_approval(multisig, approved, owners[1])
    assert approved.signers == [True, False, False]
    assert event == TransactionRevoked(multisig.key, approved.key, owners[1])


def test_revoke_after_execute(program_id, multisig, approved, owners, signer):
    execute_transaction(program_id, multisig, approved, signer, _noop)
    with pytest.raises(MultisigError) as excinfo:
        revoke_approval(multisig, approved, owners[1])
    assert excinfo.value.code is ErrorCode.TRANSACTION_ALREADY_EXECUTED
    assert approved.signers == [True, True, False]


def test_change_threshold(multisig):
    change_threshold(multisig, 3)
    assert multisig.threshold == 3
    with pytest.raises(MultisigError) as excinfo:
        change_threshold(multisig, 2)
    assert excinfo.value.code is ErrorCode.INVALID_THRESHOLD
    assert multisig.threshold == 3


def test_change_owners(multisig):
    new = [Pubkey.new_unique() for _ in range(2)]
    change_owners(multisig, new)
    assert multisig.owners == new
    with pytest.raises(MultisigError) as excinfo:
        change_owners(multisig, new[:1])
    assert excinfo.value.code is ErrorCode.INVALID_OWNER
    assert multisig.owners == new


def test_change_owners_and_threshold_rejects_low_threshold(multisig, owners):
    with pytest.raises(MultisigError) as excinfo:
        change_owners_and_threshold(multisig, owners, 2)
    assert excinfo.value.code is ErrorCode.INVALID_THRESHOLD
    assert multisig.threshold == 2


def test_change_owners_and_threshold_rejects_duplicates(multisig, owners):
    with pytest.raises(MultisigError) as excinfo:
        change_owners_and_threshold(multisig, [owners[0], owners[0]], 5)
    assert excinfo.value.code is ErrorCode.INVALID_THRESHOLD
    assert multisig.owners == owners


def test_change_owners_and_threshold_fails_on_owner_count(multisig, owners):
    with pytest.raises(MultisigError) as excinfo:
        change_owners_and_threshold(multisig, owners[:2], 3)
    assert excinfo.value.code is ErrorCode.INVALID_OWNER
    assert multisig.owners == owners