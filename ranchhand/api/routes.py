"""
Application API routes.

Includes:
- health (open)
- ingest / query / answer (shared-secret protected)
- profiles / models / namespaces (shared-secret protected)
"""

import time
import uuid
from typing import Any, Dict, List

from flask import current_app, jsonify, request

from ranchhand.api.auth import require_token
from ranchhand.api.services import Services
from ranchhand.core.errors import BadRequest
from ranchhand.core.utils.context import CallContext
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("Routes", component="api")


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise BadRequest("JSON object body required")
    return data


def _bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def small_sample(items: List[Any], n: int = 3) -> List[Dict[str, Any]]:
    sample = []
    for item in items[:n]:
        if not isinstance(item, dict):
            continue
        sample.append({
            "ts": item.get("ts", item.get("timestamp")),
            "userName": item.get("userName") or item.get("userId") or item.get("author"),
            "textSnippet": str(item.get("text") or "")[:160]
        })
    return sample


def register_routes(app, services: Services):

    def _context() -> CallContext:
        return CallContext(services.timeout_seconds)

    @app.route("/health", methods=["GET"])
    def health():
        server_cfg = services.settings.get("server", {})
        return jsonify({
            "ok": True,
            "service": "ranchhand",
            "host": server_cfg.get("host"),
            "port": server_cfg.get("port")
        })

    # ------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------

    def _handle_ingest(source: str):
        start_time = time.time()
        data = _json_body()

        namespace = data.get("namespace")
        items = data.get("items")
        chunk_words = data.get("chunkWords")
        source = data.get("source") or source

        result = services.ingestion.ingest(
            namespace,
            items,
            chunk_words=chunk_words,
            source=source,
            ctx=_context()
        )

        return jsonify({
            "ok": True,
            "jobId": str(uuid.uuid4()),
            "namespace": namespace.strip(),
            "counts": {
                "items": len(items),
                "chunks": result["chunkCount"],
                "embeddings": result["embeddedCount"]
            },
            "chunkCount": result["chunkCount"],
            "embeddedCount": result["embeddedCount"],
            "sample": small_sample(items),
            "latency_seconds": round(time.time() - start_time, 4)
        })

    @app.route("/ingest", methods=["POST"])
    @require_token
    def ingest():
        return _handle_ingest("api")

    @app.route("/ingest/slack", methods=["POST"])
    @require_token
    def ingest_slack():
        return _handle_ingest("slack")

    # ------------------------------------------------------------
    # Query
    # ------------------------------------------------------------

    @app.route("/query", methods=["POST"])
    @require_token
    def query():
        start_time = time.time()
        data = _json_body()
        default_top_k = services.settings.get("answering", {}).get("default_top_k", 5)

        namespace = data.get("namespace")
        results = services.retriever.retrieve(
            namespace,
            data.get("query"),
            top_k=data.get("topK", default_top_k),
            include_text=_bool(data.get("withText"), True),
            ctx=_context()
        )

        return jsonify({
            "ok": True,
            "namespace": namespace.strip(),
            "latency_seconds": round(time.time() - start_time, 4),
            "results": [r.to_dict() for r in results]
        })

    # ------------------------------------------------------------
    # Answer
    # ------------------------------------------------------------

    @app.route("/answer", methods=["POST"])
    @require_token
    def answer():
        start_time = time.time()
        data = _json_body()
        default_top_k = services.settings.get("answering", {}).get("default_top_k", 5)

        model_params = {
            key: data.get(key)
            for key in ("model", "temperature", "max_tokens")
            if data.get(key) is not None
        }

        result = services.agent.answer(
            data.get("namespace"),
            data.get("query"),
            top_k=data.get("topK", default_top_k),
            model_params=model_params,
            ctx=_context()
        )

        return jsonify({
            "ok": True,
            "latency_seconds": round(time.time() - start_time, 4),
            **result
        })

    # ------------------------------------------------------------
    # Profiles / models / namespaces
    # ------------------------------------------------------------

    @app.route("/profiles", methods=["GET"])
    @require_token
    def get_profiles():
        return jsonify({"ok": True, "profiles": services.profiles.current().to_dict()})

    @app.route("/profiles", methods=["POST"])
    @require_token
    def merge_profiles():
        patch = _json_body()
        profiles = services.profiles.merge(patch)
        return jsonify({"ok": True, "profiles": profiles.to_dict()})

    @app.route("/models", methods=["GET"])
    @require_token
    def models():
        out = services.client.list_models(ctx=_context())
        return jsonify({"ok": True, **out})

    @app.route("/namespaces", methods=["GET"])
    @require_token
    def namespaces():
        return jsonify({"ok": True, "namespaces": services.store.namespaces()})

    @app.route("/secret", methods=["GET"])
    @require_token
    def secret_present():
        return jsonify({"ok": True, "present": bool(current_app.config.get("RANCHHAND_SECRET"))})
