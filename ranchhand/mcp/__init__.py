"""
RanchHand — MCP Module

    from ranchhand.mcp import build_server
    build_server().run()
"""

from .server import BackendTools, build_server, run


__all__ = ["BackendTools", "build_server", "run"]
