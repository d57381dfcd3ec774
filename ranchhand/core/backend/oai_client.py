"""
RanchHand — OpenAI-Compatible Backend Client

Responsibilities:
- GET  /models
- POST /chat/completions (blocking and server-sent-event streaming)
- POST /embeddings
- Bearer auth when an API key is configured
- Per-call timeout bounded by the caller's CallContext

Transport failures surface as BackendError carrying the remote message;
timeouts surface as BackendTimeout. Nothing here retries.

Config Source:
- config/settings.yaml → backend (overridable with OAI_* env vars)
"""

import json
from typing import Any, Dict, Iterator, List, Optional, Union

import requests

from ranchhand.config.system_loader import get_backend_config
from ranchhand.core.errors import BackendError, BackendTimeout
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("OpenAICompatibleClient", component="api")


def _drop_unset(body: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in body.items() if v is not None}


def extract_text_from_chat(out: Dict[str, Any]) -> str:
    """
    Text of the first choice's message; falls back to joining every
    choice's content. Never raises on a malformed payload.
    """

    choices = (out or {}).get("choices") or []
    if not isinstance(choices, list):
        return ""

    first = choices[0] if choices else None
    if isinstance(first, dict):
        content = (first.get("message") or {}).get("content")
        if content:
            return str(content)

    parts = []
    for choice in choices:
        if isinstance(choice, dict):
            parts.append((choice.get("message") or {}).get("content") or "")

    return "".join(str(p) for p in parts)


class OpenAICompatibleClient:

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):

        backend_cfg = {}
        if base_url is None or default_model is None or timeout_seconds is None:
            backend_cfg = get_backend_config()

        self.base_url = (base_url or backend_cfg.get("base_url", "http://localhost:11434/v1")).rstrip("/")
        self.api_key = api_key if api_key is not None else backend_cfg.get("api_key", "")
        self.default_model = default_model or backend_cfg.get("default_model", "llama3:latest")
        self.timeout = float(
            timeout_seconds
            if timeout_seconds is not None
            else backend_cfg.get("timeout_seconds", 60)
        )
        self.session = session or requests.Session()

    # -------------------------------------------------
    # HTTP
    # -------------------------------------------------

    def _url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _timeout_for(self, ctx: Optional[CallContext]) -> float:
        if ctx is None:
            return self.timeout
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        if remaining <= 0:
            raise BackendTimeout(f"deadline of {ctx.timeout_seconds}s exceeded", stage="backend")
        return min(self.timeout, remaining)

    def _request_json(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:

        if ctx is not None:
            ctx.check(stage="backend")

        url = self._url(path)

        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                data=json.dumps(body) if body is not None else None,
                timeout=self._timeout_for(ctx)
            )
        except requests.Timeout:
            logger.error("Backend timeout: %s %s", method, path)
            raise BackendTimeout(f"{method} {path} timed out", stage="backend")
        except requests.RequestException as e:
            logger.error("Backend unreachable: %s %s (%s)", method, path, e)
            raise BackendError(f"backend unreachable: {e}", stage="backend")

        try:
            payload = response.json()
        except ValueError:
            payload = {"error": {"message": response.text or "non-json response"}}

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                error = payload.get("error")
                if isinstance(error, dict):
                    message = error.get("message")
                elif isinstance(error, str):
                    message = error
            raise BackendError(message or response.reason or f"HTTP {response.status_code}", stage="backend")

        return payload

    # -------------------------------------------------
    # Public API
    # -------------------------------------------------

    def list_models(self, ctx: Optional[CallContext] = None) -> Dict[str, Any]:
        return self._request_json("/models", ctx=ctx)

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:

        body = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "top_p": top_p,
            "max_tokens": max_tokens,
            "stream": False
        }
        body = _drop_unset(body)

        out = self._request_json("/chat/completions", method="POST", body=body, ctx=ctx)
        return {"text": extract_text_from_chat(out), "raw": out}

    def chat_completion_stream(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        ctx: Optional[CallContext] = None
    ) -> Iterator[Dict[str, Any]]:

        body = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "top_p": top_p,
            "max_tokens": max_tokens,
            "stream": True
        }
        body = _drop_unset(body)

        if ctx is not None:
            ctx.check(stage="backend")

        try:
            response = self.session.post(
                self._url("/chat/completions"),
                headers=self._headers(),
                data=json.dumps(body),
                timeout=self._timeout_for(ctx),
                stream=True
            )
        except requests.Timeout:
            raise BackendTimeout("streaming chat timed out", stage="backend")
        except requests.RequestException as e:
            raise BackendError(f"backend unreachable: {e}", stage="backend")

        if not response.ok:
            response.close()
            raise BackendError(f"HTTP {response.status_code} streaming not available", stage="backend")

        # SSE payloads are UTF-8 regardless of the declared charset
        response.encoding = "utf-8"

        with response:
            for line in response.iter_lines(decode_unicode=True):
                if ctx is not None and ctx.cancelled:
                    return

                line = (line or "").strip()
                if not line.startswith("data:"):
                    continue

                data = line[5:].strip()
                if data == "[DONE]":
                    return

                try:
                    chunk = json.loads(data)
                except ValueError:
                    continue

                if not isinstance(chunk, dict):
                    continue

                choices = chunk.get("choices")
                if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
                    continue

                delta = choices[0].get("delta")
                delta = delta.get("content") if isinstance(delta, dict) else None
                if delta and isinstance(delta, str):
                    yield {"delta": delta, "raw": chunk}

    def embeddings(
        self,
        input: Union[str, List[str]],
        model: Optional[str] = None,
        ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:

        body = {"model": model or self.default_model, "input": input}
        return self._request_json("/embeddings", method="POST", body=body, ctx=ctx)


def collect_stream_to_text(stream: Iterator[Dict[str, Any]]) -> Dict[str, Any]:
    chunks = [c["delta"] for c in stream]
    return {"text": "".join(chunks), "chunks": chunks}
