"""Tests for ActionGuard."""

import threading

import pytest

from redtools.core.exceptions import ApiError, BusyError
from redtools.services.action_guard import ActionGuard, GENERIC_ERROR_MESSAGE


class TestActionGuard:
    def test_success_result(self):
        guard = ActionGuard()
        result = guard.run("summarize", lambda a, b: a + b, 2, b=3)
        assert result.ok
        assert result.value == 5
        assert result.action == "summarize"
        assert not guard.is_busy("summarize")

    def test_redtools_error_becomes_message(self):
        guard = ActionGuard()

        def fail():
            raise ApiError(429, "rate limited")

        result = guard.run("ask", fail)
        assert not result.ok
        assert result.error == "rate limited"
        assert result.value is None
        assert not guard.is_busy("ask")

    def test_unexpected_error_becomes_generic_message(self):
        guard = ActionGuard()

        def boom():
            raise RuntimeError("bug")

        result = guard.run("ask", boom)
        assert result.error == GENERIC_ERROR_MESSAGE
        assert guard.active_actions() == set()

    def test_begin_twice_raises(self):
        guard = ActionGuard()
        guard.begin("fetch")
        with pytest.raises(BusyError):
            guard.begin("fetch")
        guard.finish("fetch")
        guard.begin("fetch")

    def test_second_call_rejected_while_first_runs(self):
        guard = ActionGuard()
        started = threading.Event()
        release = threading.Event()
        results = []

        def slow():
            started.set()
            release.wait(5)
            return "done"

        worker = threading.Thread(target=lambda: results.append(guard.run("summarize", slow)))
        worker.start()
        assert started.wait(5)

        rejected = guard.run("summarize", lambda: "second")
        other = guard.run("export", lambda: "independent")

        release.set()
        worker.join(5)

        assert not rejected.ok
        assert "already in progress" in rejected.error
        assert other.value == "independent"
        assert results[0].value == "done"
        assert not guard.is_busy("summarize")
