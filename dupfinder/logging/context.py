"""Context propagation for structured logging.

Fields pushed here (run_id, source_id, mode, ...) are injected into every log
record emitted within the scope. Context lives in a ContextVar, so worker
threads only see it when they are started inside a copied context; see
``run_in_context``.
"""

import contextvars
from contextvars import ContextVar, Token
from typing import Any, Callable, Dict, Optional


LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the current logging context."""
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge new fields into the logging context.

    Args:
        **kwargs: Key-value pairs to add to the logging context

    Returns:
        Token that restores the previous context via pop_log_context()

    Example:
        >>> token = push_log_context(run_id="abc123", source_id="access.log")
        >>> pop_log_context(token)
    """
    current = LogContextVar.get()
    return LogContextVar.set({**current, **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the logging context captured by ``token``."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Clear all logging context fields (mostly useful in tests)."""
    LogContextVar.set({})


def run_in_context(target: Callable[..., Any]) -> Callable[..., Any]:
    """Bind ``target`` to a snapshot of the caller's context.

    ``threading.Thread`` starts with an empty context, which would drop the
    run_id of the detection run from every record a reader thread emits.

    Example:
        >>> thread = threading.Thread(target=run_in_context(read_source), args=(...))
    """
    ctx = contextvars.copy_context()

    def runner(*args, **kwargs):
        return ctx.run(target, *args, **kwargs)

    return runner


class log_context:
    """Context manager for scoped logging context.

    Example:
        >>> with log_context(run_id="abc123", mode="multi-source"):
        ...     logger.info("Detection started")  # includes run_id and mode
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
