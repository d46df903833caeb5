"""Request- and event-scoped logging context.

Fields pushed here are attached to every log record emitted inside the scope
(request ids, the event being fanned out, the acting user). Storage is a
ContextVar, so each request thread and each email worker keeps its own copy.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional


LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("insyd_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return LogContextVar.get().copy()


def push_log_context(**fields) -> Token:
    """Merge ``fields`` into the active context.

    Returns:
        Token to hand back to pop_log_context() to restore the previous state

    Example:
        >>> token = push_log_context(request_id="r-1", path="/blogs")
        >>> pop_log_context(token)
    """
    return LogContextVar.set({**LogContextVar.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the context captured by ``token``."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop every context field. Mostly useful in tests."""
    LogContextVar.set({})


class log_context:
    """Context manager pushing fields for the duration of a block.

    Example:
        >>> with log_context(event_type="new-blog", actor="a@x.com"):
        ...     logger.info("Fanning out")  # carries event_type and actor
    """

    def __init__(self, **fields):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
