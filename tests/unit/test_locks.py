import threading
import time

import pytest

from attribute_lib.errors import LockTimeoutError
from attribute_lib.storage.locks import LockManager


def test_lock_is_reentrant_for_holder(tmp_path):
    m = LockManager(tmp_path / "locks", timeout=0.2)
    with m.lock("ns", "alice"):
        assert m.is_locked("ns", "alice")
        with m.lock("ns", "alice"):
            assert m.is_locked("ns", "alice")
        assert m.is_locked("ns", "alice")
    assert not m.is_locked("ns", "alice")


def test_lock_file_uses_encoded_key(tmp_path):
    m = LockManager(tmp_path / "locks")
    with m.lock("a/b", "c.d"):
        assert (tmp_path / "locks" / "a%2Fb.c%2Ed.lock").exists()
    assert m.lock_key("a/b", "c.d") == "a/b.c.d"


def test_other_thread_times_out(tmp_path):
    m = LockManager(tmp_path / "locks", timeout=0.1)
    errors = []

    def contend():
        try:
            with m.lock("ns", "alice"):
                pass
        except LockTimeoutError as e:
            errors.append(e)

    with m.lock("ns", "alice"):
        t = threading.Thread(target=contend)
        t.start()
        t.join(2)

    assert len(errors) == 1
    assert errors[0].key == "ns.alice"


def test_different_keys_do_not_block(tmp_path):
    m = LockManager(tmp_path / "locks", timeout=0.1)
    done = []

    def other():
        with m.lock("ns", "bob"):
            done.append(True)

    with m.lock("ns", "alice"):
        t = threading.Thread(target=other)
        t.start()
        t.join(2)
    assert done == [True]


def test_file_lock_excludes_other_managers(tmp_path):
    # A second manager stands in for another process: it only shares the lock file.
    first = LockManager(tmp_path / "locks", timeout=0.1)
    second = LockManager(tmp_path / "locks", timeout=0.1)
    with first.lock("ns", "alice"):
        with pytest.raises(LockTimeoutError):
            with second.lock("ns", "alice"):
                pass
    with second.lock("ns", "alice"):
        pass


def test_lock_released_on_error(tmp_path):
    m = LockManager(tmp_path / "locks", timeout=0.1)
    with pytest.raises(RuntimeError):
        with m.lock("ns", "alice"):
            raise RuntimeError("boom")
    assert not m.is_locked("ns", "alice")
    with LockManager(tmp_path / "locks", timeout=0.1).lock("ns", "alice"):
        pass


def test_waiter_gets_lock_after_release(tmp_path):
    m = LockManager(tmp_path / "locks", timeout=2.0)
    order = []
    holding = threading.Event()

    def holder():
        with m.lock("ns", "alice"):
            holding.set()
            time.sleep(0.2)
            order.append("holder")

    t = threading.Thread(target=holder)
    t.start()
    holding.wait(2)
    with m.lock("ns", "alice"):
        order.append("waiter")
    t.join(2)
    assert order == ["holder", "waiter"]


def test_unusable_lock_file_raises_and_releases(tmp_path):
    m = LockManager(tmp_path / "locks", timeout=0.1)
    with pytest.raises(OSError):
        with m.lock("ns", "u" * 300):
            pass
    assert not m.is_locked("ns", "u" * 300)
    with m.lock("ns", "alice"):
        pass
