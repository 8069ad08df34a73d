"""
interactive-parse — unit tests for advisory cancellation

File: tests/unit/terminal/test_cancellation.py
"""

from __future__ import annotations

import os
import signal
import threading

import pytest

from interactive_parse.terminal.cancellation import CancellationSource


@pytest.mark.unit
def test_requests_are_polled_in_order() -> None:
    source = CancellationSource()
    source.request("first")
    source.request()

    assert source.poll() == "first"
    assert source.poll() == "undo"
    assert source.poll() is None


@pytest.mark.unit
def test_drain_discards_pending_requests() -> None:
    source = CancellationSource()
    for _ in range(3):
        source.request()

    assert source.drain() == 3
    assert source.poll() is None


@pytest.mark.unit
def test_requests_from_other_threads_are_observed() -> None:
    source = CancellationSource()
    workers = [threading.Thread(target=source.request, args=(f"t{i}",)) for i in range(8)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert source.drain() == 8


@pytest.mark.unit
def test_signal_handler_must_be_installed_on_main_thread() -> None:
    source = CancellationSource()
    errors: list[BaseException] = []

    def install() -> None:
        try:
            source.install_signal_handler(signal.SIGINT)
        except RuntimeError as exc:
            errors.append(exc)

    worker = threading.Thread(target=install)
    worker.start()
    worker.join()

    assert len(errors) == 1


@pytest.mark.unit
@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="requires POSIX signals")
def test_signal_handler_queues_request_and_restores_previous() -> None:
    source = CancellationSource()
    previous = signal.getsignal(signal.SIGUSR1)

    restore = source.install_signal_handler(signal.SIGUSR1)
    try:
        os.kill(os.getpid(), signal.SIGUSR1)
        assert source.poll() == f"signal:{int(signal.SIGUSR1)}"
    finally:
        restore()

    assert signal.getsignal(signal.SIGUSR1) == previous
