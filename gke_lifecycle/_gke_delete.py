"""Drive GKE cluster and node pool deletion to completion.

The control plane allows one mutating operation per cluster at a time and
answers any other request with a "busy" error. Cluster deletion therefore
retries on busy within a bounded :class:`Backoff`, while node pool deletion
makes a single attempt and reports :attr:`Status.RETRY` so the caller's own
reconcile loop can requeue it.

Examples
--------
Delete a cluster with a shorter schedule than the default:

>>> reconciler = LifecycleReconciler(client, backoff=Backoff(10, 6))  # doctest: +SKIP
>>> reconciler.remove_cluster(config, cancel=threading.Event())  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from ._gke_backoff import DEFAULT_BACKOFF, Backoff
from ._gke_classify import ErrorClass, ErrorClassifier, classify_error
from ._gke_client import GKEClusterService
from ._gke_errors import ReconcileCancelledError, RetryBudgetExhaustedError
from ._gke_identity import cluster_rrn, location, node_pool_rrn
from ._gke_models import GKEClusterConfig, OperationAttempt, Status

logger = logging.getLogger(__name__)


class CancelSignal(Protocol):
    """Cooperative cancellation token, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...

    def wait(self, timeout: float | None = None) -> bool: ...


class LifecycleReconciler:
    """Reconcile delete operations for one cluster and its node pools.

    Parameters
    ----------
    client : GKEClusterService
        Control plane client issuing the delete calls.
    backoff : Backoff, optional
        Retry schedule for cluster deletion.
    classifier : ErrorClassifier, optional
        Maps remote errors to an :class:`ErrorClass`.
    sleep : Callable[[float], object] | None, optional
        Replaces the wait between attempts. By default the wait is
        interruptible through the cancel signal passed to
        :meth:`remove_cluster`.
    """

    def __init__(
        self,
        client: GKEClusterService,
        *,
        backoff: Backoff = DEFAULT_BACKOFF,
        classifier: ErrorClassifier = classify_error,
        sleep: Callable[[float], object] | None = None,
    ) -> None:
        self.client = client
        self.backoff = backoff
        self.classifier = classifier
        self._sleep = sleep

    def _pause(self, seconds: float, cancel: CancelSignal | None) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        elif cancel is not None:
            cancel.wait(seconds)
        else:
            time.sleep(seconds)

    def remove_cluster(
        self,
        config: GKEClusterConfig,
        *,
        cancel: CancelSignal | None = None,
    ) -> None:
        """Delete the cluster described by ``config``, retrying while busy.

        A cluster that is already gone counts as deleted.

        Parameters
        ----------
        config : GKEClusterConfig
            Configuration naming the project, location and cluster.
        cancel : CancelSignal | None, optional
            Checked before every attempt. Calls already in flight are not
            interrupted.

        Raises
        ------
        ReconcileCancelledError
            If ``cancel`` is set before an attempt is issued.
        RetryBudgetExhaustedError
            If the cluster is still busy after ``backoff.steps`` attempts.
        Exception
            Any unclassified error raised by the client, unchanged.
        """
        spec = config.spec
        name = cluster_rrn(spec.project_id, location(spec.region, spec.zone), spec.cluster_name)
        steps = self.backoff.steps
        logger.info("Removing cluster %s (up to %d attempts)", name, steps)

        attempt: OperationAttempt | None = None
        for ordinal in range(1, steps + 1):
            if cancel is not None and cancel.is_set():
                logger.error("Cancelled before attempt %d for %s", ordinal, name)
                msg = f"cluster removal for {name} cancelled before attempt {ordinal}"
                raise ReconcileCancelledError(msg)

            attempt = OperationAttempt(ordinal=ordinal, started_at=time.monotonic())
            logger.info("Deleting cluster %s (attempt %d/%d)", name, ordinal, steps)
            try:
                self.client.cluster_delete(name)
            except Exception as exc:
                attempt.last_error = exc
                outcome = self.classifier(exc)
                if outcome is ErrorClass.FATAL:
                    logger.error(
                        "Permanent error deleting cluster %s (attempt %d): %s",
                        name,
                        ordinal,
                        exc,
                    )
                    raise
            else:
                outcome = ErrorClass.NONE

            elapsed = time.monotonic() - attempt.started_at
            if outcome is ErrorClass.NONE:
                logger.info(
                    "Deleted cluster %s (attempt %d, %.1fs)", name, ordinal, elapsed
                )
                return
            if outcome is ErrorClass.ABSENT:
                logger.info(
                    "Cluster %s not found, treating as deleted (attempt %d)",
                    name,
                    ordinal,
                )
                return

            logger.info(
                "Cluster %s is busy (attempt %d/%d): %s",
                name,
                ordinal,
                steps,
                attempt.last_error,
            )
            if ordinal < steps:
                delay = self.backoff.delay(ordinal)
                logger.debug("Waiting %.1fs before retrying %s", delay, name)
                self._pause(delay, cancel)

        logger.error("Cluster %s still busy after %d attempts, giving up", name, steps)
        last_error = attempt.last_error if attempt is not None else None
        raise RetryBudgetExhaustedError(name, steps) from last_error

    def remove_node_pool(
        self,
        config: GKEClusterConfig,
        node_pool_name: str,
    ) -> tuple[Status, Exception | None]:
        """Issue a single delete for a node pool and report the outcome.

        Returns
        -------
        tuple[Status, Exception | None]
            ``(CHANGED, None)`` when the delete started, ``(RETRY, None)``
            when the cluster is busy, ``(NOT_CHANGED, None)`` when the pool is
            already gone and ``(NOT_CHANGED, error)`` for any other failure.
        """
        spec = config.spec
        name = node_pool_rrn(
            spec.project_id,
            location(spec.region, spec.zone),
            spec.cluster_name,
            node_pool_name,
        )
        try:
            self.client.node_pool_delete(name)
        except Exception as exc:
            outcome = self.classifier(exc)
            if outcome is ErrorClass.BUSY:
                logger.info("Node pool %s is busy, requesting retry: %s", name, exc)
                return Status.RETRY, None
            if outcome is ErrorClass.ABSENT:
                logger.info("Node pool %s not found, nothing to delete", name)
                return Status.NOT_CHANGED, None
            if outcome is ErrorClass.FATAL:
                logger.error("Error deleting node pool %s: %s", name, exc)
                return Status.NOT_CHANGED, exc
        logger.info("Deleting node pool %s", name)
        return Status.CHANGED, None


def remove_cluster(
    client: GKEClusterService,
    config: GKEClusterConfig,
    *,
    backoff: Backoff = DEFAULT_BACKOFF,
    cancel: CancelSignal | None = None,
) -> None:
    """Delete a cluster, retrying while it is busy.

    See :meth:`LifecycleReconciler.remove_cluster`.
    """
    LifecycleReconciler(client, backoff=backoff).remove_cluster(config, cancel=cancel)


def remove_node_pool(
    client: GKEClusterService,
    config: GKEClusterConfig,
    node_pool_name: str,
) -> tuple[Status, Exception | None]:
    """Delete a node pool with a single attempt.

    See :meth:`LifecycleReconciler.remove_node_pool`.
    """
    return LifecycleReconciler(client).remove_node_pool(config, node_pool_name)
