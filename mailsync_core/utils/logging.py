"""Logging utilities for consistent, context-rich logs across the sync engine."""

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any, TypeVar, cast

# Type variable for decorator pattern
F = TypeVar("F", bound=Callable[..., Any])


class ContextLogger:
    """Logger that attaches a persistent context dict to every record.

    Usage:
        logger = ContextLogger(__name__)
        logger.set_context(workspace_id="w-1", account_id="a-1")
        logger.info("Sync started")  # carries workspace_id and account_id

        with logger.context(thread_id="t-1"):
            logger.debug("Saving thread")  # also carries thread_id
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self._context: dict[str, Any] = {}

    @property
    def current_context(self) -> dict[str, Any]:
        return dict(self._context)

    def set_context(self, **kwargs) -> None:
        """Set persistent context data for all subsequent log calls."""
        self._context.update(kwargs)

    def clear_context(self, *keys) -> None:
        """Clear specific keys from context, or all if no keys specified."""
        if not keys:
            self._context.clear()
            return
        for key in keys:
            self._context.pop(key, None)

    @contextmanager
    def context(self, **kwargs) -> Iterator["ContextLogger"]:
        """Temporarily extend the context, restoring the previous one on exit."""
        previous = self._context.copy()
        self._context.update(kwargs)
        try:
            yield self
        finally:
            self._context = previous

    def _log(
        self,
        level: int,
        msg: str,
        *args,
        extra_context: dict[str, Any] | None = None,
        **kwargs,
    ) -> None:
        log_context = self._context.copy()
        if extra_context:
            log_context.update(extra_context)

        # The standard logger only accepts the 'extra' kwarg
        kwargs["extra"] = {**(kwargs.get("extra") or {}), "context": log_context}

        self.logger.log(level, msg, *args, **kwargs)

    def debug(
        self, msg: str, *args, extra_context: dict[str, Any] | None = None, **kwargs,
    ) -> None:
        self._log(logging.DEBUG, msg, *args, extra_context=extra_context, **kwargs)

    def info(
        self, msg: str, *args, extra_context: dict[str, Any] | None = None, **kwargs,
    ) -> None:
        self._log(logging.INFO, msg, *args, extra_context=extra_context, **kwargs)

    def warning(
        self, msg: str, *args, extra_context: dict[str, Any] | None = None, **kwargs,
    ) -> None:
        self._log(logging.WARNING, msg, *args, extra_context=extra_context, **kwargs)

    def error(
        self, msg: str, *args, extra_context: dict[str, Any] | None = None, **kwargs,
    ) -> None:
        self._log(logging.ERROR, msg, *args, extra_context=extra_context, **kwargs)

    def exception(
        self, msg: str, *args, extra_context: dict[str, Any] | None = None, **kwargs,
    ) -> None:
        """Log an error with the active exception's traceback."""
        self._log(
            logging.ERROR,
            msg,
            *args,
            extra_context=extra_context,
            exc_info=True,
            **kwargs,
        )


class ContextFormatter(logging.Formatter):
    """Formatter that renders the context dict attached by ContextLogger."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} [{rendered}]"


def with_request_id(func: F) -> F:
    """Decorator that passes a fresh ``_request_id`` to the wrapped function.

    Usage:
        @with_request_id
        def sync(workspace_id, account_id, _request_id=None):
            logger.set_context(request_id=_request_id)
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        kwargs["_request_id"] = str(uuid.uuid4())
        return func(*args, **kwargs)

    return cast(F, wrapper)
