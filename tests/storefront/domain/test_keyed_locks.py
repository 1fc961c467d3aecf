"""Tests for per-key locking."""

import threading

import pytest

from storefront.errors import ResourceBusy
from storefront.utils.locks import KeyedLocks


class TestKeyedLocks:
    def test_hold_and_release(self):
        locks = KeyedLocks()
        with locks.hold("cart:1", "user:1", timeout=0.1):
            pass
        with locks.hold("cart:1", timeout=0.1):
            pass

    def test_reentrant_in_same_thread(self):
        locks = KeyedLocks()
        with locks.hold("cart:1", timeout=0.1):
            with locks.hold("cart:1", timeout=0.1):
                pass

    def test_contended_key_times_out(self):
        locks = KeyedLocks()
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("user:1", timeout=1):
                held.set()
                release.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(1)
        try:
            with pytest.raises(ResourceBusy) as exc:
                with locks.hold("cart:9", "user:1", timeout=0.05):
                    pass
            assert exc.value.key == "user:1"
        finally:
            release.set()
            thread.join()

    def test_partial_acquisition_is_released(self):
        locks = KeyedLocks()
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("user:1", timeout=1):
                held.set()
                release.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(1)
        try:
            with pytest.raises(ResourceBusy):
                with locks.hold("cart:1", "user:1", timeout=0.05):
                    pass
        finally:
            release.set()
            thread.join()

        acquired = []

        def other():
            with locks.hold("cart:1", timeout=0.5):
                acquired.append(True)

        worker = threading.Thread(target=other)
        worker.start()
        worker.join()
        assert acquired == [True]
