"""Exception hierarchy for GKE lifecycle reconciliation.

Callers can catch :class:`GKELifecycleError` to handle every failure raised
by this package. Fatal errors reported by the control plane client are not
wrapped; they propagate as the client raised them.

Exceptions
----------
GKELifecycleError
ReconcileCancelledError
RetryBudgetExhaustedError
RemoteOperationError
ClusterConfigError
SecurityComplianceError
"""

from __future__ import annotations


class GKELifecycleError(Exception):
    """Base error for GKE lifecycle helpers."""


class ReconcileCancelledError(GKELifecycleError):
    """Raised when the caller cancels a reconciliation before an attempt."""


class RetryBudgetExhaustedError(GKELifecycleError):
    """Raised when a resource stays busy for every attempt in the budget.

    Parameters
    ----------
    resource
        Resource name that never became available.
    attempts
        Number of delete attempts issued before giving up.

    Examples
    --------
    >>> str(RetryBudgetExhaustedError("projects/p/locations/l/clusters/c", 12))
    'timed out waiting for projects/p/locations/l/clusters/c after 12 attempts'
    """

    def __init__(self, resource: str, attempts: int) -> None:
        super().__init__(f"timed out waiting for {resource} after {attempts} attempts")
        self.resource = resource
        self.attempts = attempts


class RemoteOperationError(GKELifecycleError):
    """Raised by the gcloud client adapter when a remote call fails.

    The string form follows the Google API error layout,
    ``Error <code>: <message>, <reason>``, so marker based classification
    sees the same text it would from the API client.

    Examples
    --------
    >>> str(RemoteOperationError("Not found: clusters/c", code=404))
    'Error 404: Not found: clusters/c, notFound'
    """

    _REASONS = {
        400: "badRequest",
        403: "forbidden",
        404: "notFound",
        409: "conflict",
        429: "rateLimitExceeded",
    }

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def reason(self) -> str | None:
        """Return the Google API reason matching :attr:`code`, if known."""
        if self.code is None:
            return None
        return self._REASONS.get(self.code)

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        text = f"Error {self.code}: {self.message}"
        if self.reason:
            text = f"{text}, {self.reason}"
        return text


class ClusterConfigError(GKELifecycleError):
    """Raised when a GKEClusterConfig manifest cannot be interpreted."""


class SecurityComplianceError(GKELifecycleError):
    """Raised when a cluster configuration violates the security checklist.

    Attributes
    ----------
    reason
        Description of the first checklist rule that failed.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
