from .logging_utils import get_logger, get_component_logger
from .context import CallContext, DEFAULT_TIMEOUT_SECONDS

__all__ = ["get_logger", "get_component_logger", "CallContext", "DEFAULT_TIMEOUT_SECONDS"]
