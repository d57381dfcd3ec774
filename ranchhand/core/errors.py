"""
RanchHand — Error Taxonomy

Every error the service surfaces carries:
- kind   → stable tag clients can switch on
- stage  → pipeline stage that failed (chunk / embed / query / generate ...)
- detail → human-readable message, never a stack trace or a secret
"""

from typing import Any, Dict, Optional


class RanchHandError(Exception):
    """Base class for structured service errors."""

    kind = "Error"
    http_status = 500

    def __init__(self, detail: str, stage: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.stage = stage

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": self.kind,
            "stage": self.stage,
            "detail": self.detail
        }

    def __str__(self):
        if self.stage:
            return f"{self.kind} [{self.stage}]: {self.detail}"
        return f"{self.kind}: {self.detail}"


class BadRequest(RanchHandError):
    """Caller error: missing namespace, items or query. Not retryable."""

    kind = "BadRequest"
    http_status = 400


class Unauthorized(RanchHandError):
    kind = "Unauthorized"
    http_status = 401


class BackendError(RanchHandError):
    """Transport-level failure talking to the OpenAI-compatible backend."""

    kind = "BackendError"
    http_status = 502


class EmbedFailed(RanchHandError):
    kind = "EmbedFailed"
    http_status = 502


class GenerateFailed(RanchHandError):
    kind = "GenerateFailed"
    http_status = 502


class BackendTimeout(RanchHandError):
    """A collaborator call exceeded its deadline."""

    kind = "Timeout"
    http_status = 504


class OperationCancelled(RanchHandError):
    kind = "Cancelled"
    http_status = 499
