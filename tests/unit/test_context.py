"""
Unit tests for CallContext deadlines and cancellation.
"""

import threading
import time

import pytest

from ranchhand.core.errors import BackendTimeout, OperationCancelled
from ranchhand.core.utils.context import CallContext


class TestCallContext:

    def test_fresh_context_passes(self):
        ctx = CallContext(timeout_seconds=5)

        ctx.check("embed")

        assert not ctx.cancelled
        assert not ctx.expired()
        assert 0 < ctx.remaining() <= 5

    def test_unbounded(self):
        ctx = CallContext(timeout_seconds=None)

        assert ctx.remaining() is None
        assert not ctx.expired()

    def test_cancel(self):
        ctx = CallContext()
        ctx.cancel()

        with pytest.raises(OperationCancelled) as exc:
            ctx.check("generate")

        assert exc.value.stage == "generate"
        assert exc.value.to_dict()["error"] == "Cancelled"

    def test_shared_cancel_event(self):
        event = threading.Event()
        ctx = CallContext(cancel_event=event)

        event.set()

        assert ctx.cancelled

    def test_deadline(self):
        ctx = CallContext(timeout_seconds=0.01)
        time.sleep(0.05)

        assert ctx.expired()
        assert ctx.remaining() == 0.0
        with pytest.raises(BackendTimeout) as exc:
            ctx.check("embed")

        assert exc.value.kind == "Timeout"
        assert exc.value.stage == "embed"

    def test_cancel_wins_over_deadline(self):
        ctx = CallContext(timeout_seconds=0)
        ctx.cancel()

        with pytest.raises(OperationCancelled):
            ctx.check()
