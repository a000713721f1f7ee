"""
Exception helpers for the 502 path.

Upstream failures may arrive as exception groups (anyio task groups inside
httpx) or as exceptions whose __str__ itself fails. These helpers always
produce a short message and never raise.
"""

import logging


def _safe_str(obj) -> str:
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} (string conversion failed)>"


def _sub_exceptions(exception) -> list:
    try:
        return list(getattr(exception, "exceptions", None) or [])
    except Exception:
        return []


def format_exception_message(exception: Exception) -> str:
    """
    Short, single-line description of an exception for the response body.

    Falls back to the exception type name when the message is empty, and
    lists the members of an exception group.
    """
    if exception is None:
        return "None"
    message = _safe_str(exception) or type(exception).__name__
    members = _sub_exceptions(exception)
    if not members:
        return message
    described = "; ".join(
        f"{type(sub).__name__}: {_safe_str(sub)}" for sub in members
    )
    return f"{message} (Sub-exceptions: {described})"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """Log an exception with its traceback, one record per group member."""
    try:
        members = _sub_exceptions(exception)
        if not members:
            logger.log(
                level,
                f"{prefix} Exception: {_safe_str(exception)}",
                exc_info=exception if exception is not None else False,
            )
            return
        logger.log(
            level,
            f"{prefix} Exception with {len(members)} sub-exceptions: {_safe_str(exception)}",
        )
        for i, sub in enumerate(members):
            logger.log(
                level,
                f"{prefix} Sub-exception {i + 1}: {type(sub).__name__}: {_safe_str(sub)}",
                exc_info=sub,
            )
    except Exception:
        # Logging must never take the request down with it
        try:
            logger.log(logging.ERROR, f"{prefix} Exception logging failed")
        except Exception:
            pass
