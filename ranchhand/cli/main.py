"""
RanchHand — Command Line

Usage:
    ranchhand serve [--host 127.0.0.1] [--port 41414]
    ranchhand models
    ranchhand chat -m "Hello" [--model llama3:latest] [--stream]
    ranchhand embed --input "some text" [--model nomic-embed-text:latest]
    ranchhand mcp
"""

import argparse
import json
import sys

from ranchhand.core.backend.oai_client import OpenAICompatibleClient
from ranchhand.core.errors import RanchHandError


def build_parser() -> argparse.ArgumentParser:

    parser = argparse.ArgumentParser(prog="ranchhand", description="Local RAG gateway")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP gateway")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)

    sub.add_parser("models", help="List backend models")

    chat = sub.add_parser("chat", help="Single chat completion")
    chat.add_argument("-m", "--message", required=True)
    chat.add_argument("--model")
    chat.add_argument("--stream", action="store_true")

    embed = sub.add_parser("embed", help="Embed one input")
    embed.add_argument("--input", required=True)
    embed.add_argument("--model")

    sub.add_parser("mcp", help="Run the MCP tool server on stdio")

    return parser


def run(args, client=None, out=sys.stdout) -> int:

    if args.command == "serve":
        from ranchhand.api.app import run as run_server
        run_server(host=args.host, port=args.port)
        return 0

    if args.command == "mcp":
        from ranchhand.mcp.server import run as run_mcp
        run_mcp(client)
        return 0

    client = client or OpenAICompatibleClient()

    if args.command == "models":
        print(json.dumps(client.list_models(), indent=2), file=out)
        return 0

    if args.command == "chat":
        messages = [{"role": "user", "content": args.message}]
        if args.stream:
            for chunk in client.chat_completion_stream(messages, model=args.model):
                out.write(chunk["delta"])
                out.flush()
            out.write("\n")
            return 0
        print(client.chat_completion(messages, model=args.model)["text"], file=out)
        return 0

    if args.command == "embed":
        print(json.dumps(client.embeddings(args.input, model=args.model), indent=2), file=out)
        return 0

    build_parser().print_help(file=out)
    return 0


def main(argv=None) -> int:

    args = build_parser().parse_args(argv)

    try:
        return run(args)
    except RanchHandError as e:
        print(f"Error: {e.detail}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
