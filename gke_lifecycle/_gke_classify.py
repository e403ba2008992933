"""Classify errors returned by GKE mutation calls.

The Container API does not expose structured error codes on every path, so
classification matches two message markers. Both live here so that a
structured classifier can replace :func:`classify_error` without touching the
reconciliation engine.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

# Reported while another operation holds the per-cluster lock upstream.
BUSY_MARKER = "Please wait and try again once it is done"
NOT_FOUND_MARKER = "notFound"


class ErrorClass(Enum):
    """Classification of a remote mutation result."""

    NONE = "none"
    BUSY = "busy"
    ABSENT = "absent"
    FATAL = "fatal"


ErrorClassifier = Callable[[BaseException | None], ErrorClass]


def classify_error(error: BaseException | None) -> ErrorClass:
    """Map an error raised by a remote call to an :class:`ErrorClass`.

    Parameters
    ----------
    error : BaseException | None
        Error raised by the call, or ``None`` when it succeeded.

    Returns
    -------
    ErrorClass
        ``NONE`` for success, ``BUSY`` or ``ABSENT`` when the message carries
        the matching marker, ``FATAL`` otherwise.

    Examples
    --------
    >>> classify_error(None)
    <ErrorClass.NONE: 'none'>
    >>> classify_error(RuntimeError("Error 404: cluster missing, notFound"))
    <ErrorClass.ABSENT: 'absent'>
    >>> classify_error(RuntimeError("permission denied"))
    <ErrorClass.FATAL: 'fatal'>
    """
    if error is None:
        return ErrorClass.NONE
    message = str(error)
    if BUSY_MARKER in message:
        return ErrorClass.BUSY
    if NOT_FOUND_MARKER in message:
        return ErrorClass.ABSENT
    return ErrorClass.FATAL
