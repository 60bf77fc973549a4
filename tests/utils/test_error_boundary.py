"""Tests for the bounded-retry ErrorBoundary."""

from taskflow.utils.error_boundary import ErrorBoundary


def test_success_clears_error():
    boundary = ErrorBoundary("summary")
    assert boundary.run(lambda: "ok") == "ok"
    assert not boundary.has_error
    assert boundary.retry_count == 0


def test_flaky_render_recovers_within_budget():
    attempts = []

    def render():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("flaky")
        return "panel"

    boundary = ErrorBoundary("today", max_retries=3)
    assert boundary.run(render) == "panel"
    assert boundary.retry_count == 2
    assert not boundary.has_error


def test_fallback_after_retries_exhausted():
    calls = []

    def render():
        calls.append(1)
        raise ValueError("broken")

    boundary = ErrorBoundary("weekly", max_retries=2)
    result = boundary.run(render, fallback=lambda e: f"unavailable: {e}")

    assert result == "unavailable: broken"
    assert len(calls) == 3
    assert boundary.has_error
    assert not boundary.can_retry
    assert boundary.run(render, fallback="static") == "static"


def test_reset_restores_budget():
    boundary = ErrorBoundary("summary", max_retries=1)
    boundary.run(lambda: 1 / 0)
    assert not boundary.retry()

    boundary.reset()
    assert boundary.can_retry
    assert boundary.error is None
    assert boundary.retry() is True
