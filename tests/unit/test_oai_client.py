"""
Unit tests for the OpenAI-compatible backend client.

Tests for:
- Request payloads and headers
- Chat text extraction
- Error and timeout translation
- Server-sent-event streaming
"""

import io
import json
from unittest.mock import MagicMock

import pytest
import requests

from ranchhand.core.backend.oai_client import (
    OpenAICompatibleClient,
    collect_stream_to_text,
    extract_text_from_chat,
)
from ranchhand.core.errors import BackendError, BackendTimeout, OperationCancelled
from ranchhand.core.utils.context import CallContext


def _response(status=200, payload=None, text=None, lines=None):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.reason = "Bad Request" if status == 400 else "OK"
    if payload is not None:
        response.json.return_value = payload
        response.text = json.dumps(payload)
    else:
        response.json.side_effect = ValueError("not json")
        response.text = text or ""
    if lines is not None:
        response.iter_lines.return_value = iter(lines)
        response.__enter__.return_value = response
        response.__exit__.return_value = False
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return OpenAICompatibleClient(
        base_url="http://backend.local/v1/",
        api_key="sk-test",
        default_model="llama3:latest",
        timeout_seconds=30,
        session=session
    )


class TestExtractText:

    def test_first_choice(self):
        out = {"choices": [{"message": {"content": "hello"}}]}
        assert extract_text_from_chat(out) == "hello"

    def test_joins_choices_when_first_empty(self):
        out = {"choices": [{"message": {"content": ""}}, {"message": {"content": "b"}}]}
        assert extract_text_from_chat(out) == "b"

    @pytest.mark.parametrize("out", [{}, None, {"choices": []}, {"choices": [{}]}, {"choices": "x"}])
    def test_missing_content_is_empty_string(self, out):
        assert extract_text_from_chat(out) == ""


class TestRequests:

    def test_trailing_slash_trimmed(self, client):
        assert client.base_url == "http://backend.local/v1"

    def test_embeddings_payload_and_headers(self, client, session):
        session.request.return_value = _response(payload={"data": [{"embedding": [0.1]}]})

        out = client.embeddings(["a", "b"], model="nomic")

        assert out == {"data": [{"embedding": [0.1]}]}
        method, url = session.request.call_args[0]
        kwargs = session.request.call_args[1]
        assert method == "POST"
        assert url == "http://backend.local/v1/embeddings"
        assert json.loads(kwargs["data"]) == {"model": "nomic", "input": ["a", "b"]}
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["timeout"] == 30

    def test_no_auth_header_without_key(self, session):
        client = OpenAICompatibleClient("http://b/v1", api_key="", default_model="m", timeout_seconds=5, session=session)
        session.request.return_value = _response(payload={"data": []})

        client.list_models()

        assert "Authorization" not in session.request.call_args[1]["headers"]

    def test_chat_completion_drops_unset_params(self, client, session):
        session.request.return_value = _response(payload={"choices": [{"message": {"content": "hi"}}]})

        out = client.chat_completion([{"role": "user", "content": "hey"}], temperature=0.1)

        body = json.loads(session.request.call_args[1]["data"])
        assert body == {
            "model": "llama3:latest",
            "messages": [{"role": "user", "content": "hey"}],
            "temperature": 0.1,
            "stream": False
        }
        assert out["text"] == "hi"

    def test_timeout_bounded_by_context(self, client, session):
        session.request.return_value = _response(payload={"data": []})

        client.list_models(ctx=CallContext(timeout_seconds=2))

        assert session.request.call_args[1]["timeout"] <= 2


class TestErrors:

    def test_remote_error_message_surfaces(self, client, session):
        session.request.return_value = _response(400, payload={"error": {"message": "model not found"}})

        with pytest.raises(BackendError, match="model not found"):
            client.embeddings("x")

    def test_non_json_error_body(self, client, session):
        session.request.return_value = _response(500, text="upstream exploded")

        with pytest.raises(BackendError, match="upstream exploded"):
            client.list_models()

    def test_timeout(self, client, session):
        session.request.side_effect = requests.Timeout("slow")

        with pytest.raises(BackendTimeout) as exc:
            client.embeddings("x")

        assert exc.value.kind == "Timeout"

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(BackendError, match="unreachable"):
            client.list_models()

    def test_cancelled_context_skips_request(self, client, session):
        ctx = CallContext()
        ctx.cancel()

        with pytest.raises(OperationCancelled):
            client.list_models(ctx=ctx)

        session.request.assert_not_called()


class TestStreaming:

    def test_collects_deltas_until_done(self, client, session):
        lines = [
            'data: {"choices": [{"delta": {"content": "Hel"}}]}',
            "",
            ": keep-alive",
            "data: not-json",
            'data: {"choices": [{"delta": {"content": "lo"}}]}',
            "data: [DONE]",
            'data: {"choices": [{"delta": {"content": "ignored"}}]}',
        ]
        session.post.return_value = _response(payload={}, lines=lines)

        out = collect_stream_to_text(client.chat_completion_stream([{"role": "user", "content": "hi"}]))

        assert out["text"] == "Hello"
        assert out["chunks"] == ["Hel", "lo"]
        assert json.loads(session.post.call_args[1]["data"])["stream"] is True

    def test_stream_http_error(self, client, session):
        session.post.return_value = _response(404, payload={})

        with pytest.raises(BackendError, match="streaming not available"):
            list(client.chat_completion_stream([{"role": "user", "content": "hi"}]))

    def test_non_ascii_delta_decoded_as_utf8(self, client, session):
        body = 'data: {"choices": [{"delta": {"content": "café ☕"}}]}\n\ndata: [DONE]\n'
        response = requests.Response()
        response.status_code = 200
        response.reason = "OK"
        response.headers["Content-Type"] = "text/event-stream"
        # what requests infers for text/* without a charset
        response.encoding = "ISO-8859-1"
        response.raw = io.BytesIO(body.encode("utf-8"))
        session.post.return_value = response

        out = collect_stream_to_text(client.chat_completion_stream([{"role": "user", "content": "hi"}]))

        assert out["text"] == "café ☕"

    def test_non_object_payloads_skipped(self, client, session):
        lines = [
            "data: 5",
            'data: "x"',
            "data: null",
            'data: {"choices": "nope"}',
            'data: {"choices": [5]}',
            'data: {"choices": [{"delta": "flat"}]}',
            'data: {"choices": [{"delta": {"content": "ok"}}]}',
            "data: [DONE]",
        ]
        session.post.return_value = _response(payload={}, lines=lines)

        out = collect_stream_to_text(client.chat_completion_stream([{"role": "user", "content": "hi"}]))

        assert out["chunks"] == ["ok"]

    def test_expired_context_skips_stream_request(self, client, session):
        ctx = CallContext(timeout_seconds=0)

        with pytest.raises(BackendTimeout):
            list(client.chat_completion_stream([{"role": "user", "content": "hi"}], ctx=ctx))

        session.post.assert_not_called()


class TestDeadline:

    def test_exhausted_deadline_raises_timeout(self, client):
        ctx = CallContext(timeout_seconds=5)
        ctx.deadline = 0.0

        with pytest.raises(BackendTimeout) as exc:
            client._timeout_for(ctx)

        assert exc.value.kind == "Timeout"

    def test_deadline_lapsing_before_send_is_timeout(self, client, session, monkeypatch):
        ctx = CallContext(timeout_seconds=5)
        # passes the up-front check, then the deadline is gone by the time the request is built
        monkeypatch.setattr(ctx, "remaining", lambda: 0.0)

        with pytest.raises(BackendTimeout):
            client.embeddings("x", ctx=ctx)

        session.request.assert_not_called()
