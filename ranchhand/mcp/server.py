"""
RanchHand — MCP Tool Server

Stdio MCP server exposing the OpenAI-compatible backend as three tools:

- openai_models_list        → GET  /models
- openai_chat_completions   → POST /chat/completions (always non-streaming)
- openai_embeddings_create  → POST /embeddings

Every tool returns {"ok": True, ...backend payload} on success and
{"ok": False, "reason": ...} on failure; backend errors never escape
as protocol errors.

Run:
    ranchhand mcp
"""

from typing import Any, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP

from ranchhand import __version__
from ranchhand.core.backend.oai_client import OpenAICompatibleClient
from ranchhand.core.errors import RanchHandError
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("MCPServer", component="api")

SERVER_NAME = "ranchhand-mcp"


class BackendTools:
    """Tool handlers over one backend client. Plain methods, callable without MCP."""

    def __init__(self, client: Optional[OpenAICompatibleClient] = None):
        self.client = client or OpenAICompatibleClient()

    def _context(self) -> CallContext:
        return CallContext(self.client.timeout)

    @staticmethod
    def _failure(tool: str, error: RanchHandError) -> Dict[str, Any]:
        logger.error("%s failed: %s", tool, error)
        return {"ok": False, "reason": error.detail}

    # =====================================================
    # TOOLS
    # =====================================================

    def models_list(self) -> Dict[str, Any]:
        """List models from the OpenAI-compatible backend (GET /models)."""

        try:
            out = self.client.list_models(ctx=self._context())
        except RanchHandError as e:
            return self._failure("openai_models_list", e)

        return {"ok": True, **out}

    def chat_completions(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        stream: bool = False
    ) -> Dict[str, Any]:
        """Create a chat completion (POST /chat/completions). Replies are returned whole."""

        if not isinstance(messages, list) or not messages:
            return {"ok": False, "reason": "messages must be a non-empty list"}

        if stream:
            logger.info("openai_chat_completions: stream requested, returning a complete reply")

        try:
            out = self.client.chat_completion(
                messages,
                model=model,
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
                ctx=self._context()
            )
        except RanchHandError as e:
            return self._failure("openai_chat_completions", e)

        return {"ok": True, "text": out["text"], **out["raw"]}

    def embeddings_create(
        self,
        input: Union[str, List[str]],
        model: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create embeddings (POST /embeddings)."""

        if not input:
            return {"ok": False, "reason": "input required"}

        try:
            out = self.client.embeddings(input, model=model, ctx=self._context())
        except RanchHandError as e:
            return self._failure("openai_embeddings_create", e)

        return {"ok": True, **out}


# =====================================================
# SERVER
# =====================================================

def build_server(client: Optional[OpenAICompatibleClient] = None) -> FastMCP:

    tools = BackendTools(client)
    server = FastMCP(SERVER_NAME)

    server.add_tool(
        tools.models_list,
        name="openai_models_list",
        description="List models from OpenAI-compatible backend (GET /v1/models)."
    )
    server.add_tool(
        tools.chat_completions,
        name="openai_chat_completions",
        description="Create chat completion (POST /v1/chat/completions)."
    )
    server.add_tool(
        tools.embeddings_create,
        name="openai_embeddings_create",
        description="Create embeddings (POST /v1/embeddings)."
    )

    return server


def run(client: Optional[OpenAICompatibleClient] = None):

    server = build_server(client)
    logger.info("%s %s starting on stdio", SERVER_NAME, __version__)
    server.run()


if __name__ == "__main__":
    run()
