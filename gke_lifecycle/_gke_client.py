"""Control plane client used by the reconciliation engine.

:class:`GKEClusterService` is the only surface the engine depends on. The
:class:`GcloudClusterService` adapter implements it with the ``gcloud`` CLI so
the command-line tools can run without a generated API client.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from plumbum import CommandNotFound, local
from plumbum.commands.processes import ProcessExecutionError, ProcessTimedOut

from ._gke_errors import RemoteOperationError
from ._gke_identity import ResourceIdentity, parse_resource_name

logger = logging.getLogger(__name__)

# gcloud reports API failures as "ResponseError: code=404, message=Not found: ..."
_RESPONSE_ERROR_PATTERN = re.compile(r"code=(?P<code>\d{3}),\s*message=(?P<message>.*)", re.DOTALL)


class GKEClusterService(Protocol):
    """Mutation calls issued against the GKE control plane.

    Both calls return an operation handle on success and raise on failure.
    """

    def cluster_delete(self, name: str) -> object: ...

    def node_pool_delete(self, name: str) -> object: ...


def _parse_gcloud_error(stderr: str) -> RemoteOperationError:
    """Build a :class:`RemoteOperationError` from gcloud error output.

    Examples
    --------
    >>> err = _parse_gcloud_error(
    ...     "ERROR: (gcloud.container.clusters.delete) ResponseError: "
    ...     "code=404, message=Not found: projects/p/zones/z/clusters/c."
    ... )
    >>> err.code, err.reason
    (404, 'notFound')
    """
    text = stderr.strip()
    match = _RESPONSE_ERROR_PATTERN.search(text)
    if match is None:
        return RemoteOperationError(text or "gcloud failed without error output")
    return RemoteOperationError(match["message"].strip(), code=int(match["code"]))


class GcloudClusterService:
    """Issue asynchronous delete operations through the ``gcloud`` CLI.

    Parameters
    ----------
    executable
        Name or path of the gcloud binary.
    timeout
        Optional timeout in seconds for each invocation.

    Examples
    --------
    >>> service = GcloudClusterService()
    >>> service.cluster_delete("projects/acme/locations/us-central1/clusters/prod")  # doctest: +SKIP
    """

    def __init__(self, executable: str = "gcloud", *, timeout: float | None = None) -> None:
        self._executable = executable
        self._timeout = timeout

    @staticmethod
    def _location_args(identity: ResourceIdentity) -> list[str]:
        return [
            f"--project={identity.project_id}",
            f"--location={identity.location}",
            "--quiet",
            "--async",
            "--format=json",
        ]

    def cluster_delete(self, name: str) -> str:
        """Start deleting the cluster addressed by ``name``."""
        identity = parse_resource_name(name)
        if identity.node_pool_name is not None:
            msg = f"Expected a cluster resource name, got node pool {name!r}"
            raise ValueError(msg)
        return self._run(
            "container",
            "clusters",
            "delete",
            identity.cluster_name,
            *self._location_args(identity),
        )

    def node_pool_delete(self, name: str) -> str:
        """Start deleting the node pool addressed by ``name``."""
        identity = parse_resource_name(name)
        if identity.node_pool_name is None:
            msg = f"Expected a node pool resource name, got {name!r}"
            raise ValueError(msg)
        return self._run(
            "container",
            "node-pools",
            "delete",
            identity.node_pool_name,
            f"--cluster={identity.cluster_name}",
            *self._location_args(identity),
        )

    def _run(self, *args: str) -> str:
        logger.debug("Running %s %s", self._executable, " ".join(args))
        try:
            bound = local[self._executable][list(args)]
            _, stdout, _ = bound.run(timeout=self._timeout, new_session=True)
        except CommandNotFound as exc:
            msg = f"{self._executable} was not found on PATH"
            raise RemoteOperationError(msg) from exc
        except ProcessTimedOut as exc:
            msg = f"{self._executable} timed out after {self._timeout} seconds"
            raise RemoteOperationError(msg) from exc
        except ProcessExecutionError as exc:
            raise _parse_gcloud_error(exc.stderr or "") from exc
        return stdout
