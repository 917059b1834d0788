import pytest

from dacnode.batch import OffChainData
from dacnode.interfaces import DB, Tx
from dacnode.store import L1_SYNC_TASK, exists, get_start_block, set_start_block, store


class FakeTx(Tx):
    def __init__(self, commit_error=None, rollback_error=None):
        self.commit_error = commit_error
        self.rollback_error = rollback_error
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1
        if self.commit_error:
            raise self.commit_error

    def rollback(self):
        self.rollbacks += 1
        if self.rollback_error:
            raise self.rollback_error


class FakeDB(DB):
    def __init__(self, last=0, last_error=None, begin_error=None, store_error=None,
                 present=(), tx=None):
        self.last = last
        self.last_error = last_error
        self.begin_error = begin_error
        self.store_error = store_error
        self.present = set(present)
        self.tx = tx or FakeTx()
        self.stored_blocks = []
        self.stored_data = []
        self.queried_tasks = []

    def begin_state_transaction(self):
        if self.begin_error:
            raise self.begin_error
        return self.tx

    def store_last_processed_block(self, task, block, tx):
        self.stored_blocks.append((task, block, tx))
        if self.store_error:
            raise self.store_error

    def get_last_processed_block(self, task):
        self.queried_tasks.append(task)
        if self.last_error:
            raise self.last_error
        return self.last

    def exists(self, key):
        return key in self.present

    def store_off_chain_data(self, data, tx):
        self.stored_data.append((list(data), tx))
        if self.store_error:
            raise self.store_error

    def get_off_chain_data(self, key, tx):
        raise KeyError(key)


def test_get_start_block_steps_back_one():
    db = FakeDB(last=25)
    assert get_start_block(db) == 24
    assert db.queried_tasks == [L1_SYNC_TASK]


def test_get_start_block_zero_stays_zero():
    assert get_start_block(FakeDB(last=0)) == 0


def test_get_start_block_propagates_error():
    with pytest.raises(RuntimeError):
        get_start_block(FakeDB(last_error=RuntimeError("error")))


def test_set_start_block_stores_and_commits():
    db = FakeDB()
    set_start_block(db, 15)
    assert db.stored_blocks == [(L1_SYNC_TASK, 15, db.tx)]
    assert db.tx.commits == 1


def test_set_start_block_begin_fails():
    db = FakeDB(begin_error=RuntimeError("error"))
    with pytest.raises(RuntimeError):
        set_start_block(db, 3)
    assert db.stored_blocks == []


def test_set_start_block_store_fails_without_commit():
    db = FakeDB(store_error=ValueError("error"))
    with pytest.raises(ValueError):
        set_start_block(db, 3)
    assert db.tx.commits == 0
    assert db.tx.rollbacks == 0


def test_set_start_block_commit_fails():
    db = FakeDB(tx=FakeTx(commit_error=RuntimeError("error")))
    with pytest.raises(RuntimeError):
        set_start_block(db, 3)


def test_exists_asks_db():
    key = b"\x01" * 32
    db = FakeDB(present=[key])
    assert exists(db, key) is True
    assert exists(db, b"\x02" * 32) is False


def test_store_commits_data():
    data = [OffChainData(key=b"\x01" * 32, value=b"\x01\x02")]
    db = FakeDB()
    store(db, data)
    assert db.stored_data == [(data, db.tx)]
    assert db.tx.commits == 1
    assert db.tx.rollbacks == 0


def test_store_failure_rolls_back():
    db = FakeDB(store_error=ValueError("store failed"))
    with pytest.raises(ValueError, match="store failed"):
        store(db, [])
    assert db.tx.rollbacks == 1
    assert db.tx.commits == 0


def test_store_rollback_failure_raises_original_error():
    db = FakeDB(store_error=ValueError("store failed"),
                tx=FakeTx(rollback_error=RuntimeError("rollback fails")))
    with pytest.raises(ValueError, match="store failed"):
        store(db, [])
    assert db.tx.rollbacks == 1


def test_store_commit_failure():
    db = FakeDB(tx=FakeTx(commit_error=RuntimeError("commit failed")))
    with pytest.raises(RuntimeError, match="commit failed"):
        store(db, [])