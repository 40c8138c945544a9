# fleetrecon/utils/logger.py

"""
Logging helpers

`get_logger` returns a stdlib logger wrapped in an adapter that also accepts
keyword context, so both styles work:

    logger.info("Imported %s rows", count)
    logger.info("Ingest finished", session_id=session_id, trips=count)

Keyword context is rendered as ``key=value`` pairs after the message.
"""

import logging
import os
import sys

_RESERVED_KWARGS = {"exc_info", "stack_info", "stacklevel", "extra"}
_configured = False


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that folds keyword arguments into the log line"""

    def process(self, msg, kwargs):
        context = {
            key: kwargs.pop(key) for key in list(kwargs) if key not in _RESERVED_KWARGS
        }
        if context:
            rendered = " ".join(f"{key}={value}" for key, value in context.items())
            msg = f"{msg} | {rendered}"
        return msg, kwargs


def _configure_root() -> None:
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )
    root = logging.getLogger("fleetrecon")
    root.addHandler(handler)
    root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    root.propagate = False
    _configured = True


def get_logger(name: str) -> ContextLoggerAdapter:
    """Get a module logger under the ``fleetrecon`` hierarchy"""
    _configure_root()
    return ContextLoggerAdapter(logging.getLogger(name), {})
