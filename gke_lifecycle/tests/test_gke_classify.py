"""Unit tests for remote error classification."""

from __future__ import annotations

import pytest

from gke_lifecycle._gke_classify import (
    BUSY_MARKER,
    NOT_FOUND_MARKER,
    ErrorClass,
    classify_error,
)
from gke_lifecycle._gke_errors import RemoteOperationError


def test_classify_none_is_success() -> None:
    assert classify_error(None) is ErrorClass.NONE, "No error should classify as NONE"


@pytest.mark.parametrize(
    "message",
    [
        BUSY_MARKER,
        "Operation operation-1 is currently upgrading cluster prod. "
        "Please wait and try again once it is done.",
        "googleapi: Error 400: Please wait and try again once it is done., failedPrecondition",
    ],
)
def test_classify_busy_marker(message: str) -> None:
    assert classify_error(RuntimeError(message)) is ErrorClass.BUSY


@pytest.mark.parametrize(
    "message",
    [
        NOT_FOUND_MARKER,
        "googleapi: Error 404: Not found: projects/acme/locations/l/clusters/c., notFound",
    ],
)
def test_classify_not_found_marker(message: str) -> None:
    assert classify_error(RuntimeError(message)) is ErrorClass.ABSENT


@pytest.mark.parametrize(
    "error",
    [
        RuntimeError("googleapi: Error 403: permission denied, forbidden"),
        ValueError(""),
        RemoteOperationError("quota exceeded", code=429),
        RuntimeError("Not found"),
    ],
)
def test_classify_other_errors_are_fatal(error: Exception) -> None:
    assert classify_error(error) is ErrorClass.FATAL


def test_busy_marker_wins_over_not_found() -> None:
    error = RuntimeError(f"{NOT_FOUND_MARKER}: {BUSY_MARKER}")
    assert classify_error(error) is ErrorClass.BUSY, "Busy check should run first"


def test_remote_operation_error_404_is_absent() -> None:
    error = RemoteOperationError("Not found: projects/acme/zones/z/clusters/c.", code=404)
    assert classify_error(error) is ErrorClass.ABSENT
