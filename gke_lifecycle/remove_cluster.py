#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.12"
# dependencies = ["cyclopts>=2.9", "plumbum", "pyyaml"]
# ///
"""Delete a GKE cluster or one of its node pools.

This script:
- reads the target from a GKEClusterConfig manifest and/or GKE_* variables;
- deletes the cluster, retrying while another operation holds it; or
- with --node-pool, issues a single node pool delete and reports whether the
  caller should retry later (exit status 75).

Press Ctrl-C to stop retrying; the current gcloud call is allowed to finish.
"""

from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from gke_lifecycle._gke_client import GcloudClusterService, GKEClusterService
from gke_lifecycle._gke_delete import LifecycleReconciler
from gke_lifecycle._gke_errors import GKELifecycleError
from gke_lifecycle._gke_models import GKEClusterConfig, Status
from gke_lifecycle._lifecycle_inputs import RawRemovalInputs, resolve_removal_inputs

EX_TEMPFAIL = 75

app = App(help="Delete a GKE cluster or node pool, retrying while it is busy.")
logger = logging.getLogger(__name__)


def build_client(gcloud: str) -> GKEClusterService:
    """Return the control plane client used by :func:`main`."""
    return GcloudClusterService(gcloud)


def _remove_node_pool(
    reconciler: LifecycleReconciler,
    config: GKEClusterConfig,
    node_pool: str,
) -> int:
    try:
        status, error = reconciler.remove_node_pool(config, node_pool)
    except ValueError as exc:
        print(f"error: failed to delete node pool {node_pool}: {exc}", file=sys.stderr)
        return 1
    if error is not None:
        print(f"error: failed to delete node pool {node_pool}: {error}", file=sys.stderr)
        return 1
    if status is Status.RETRY:
        print(f"Node pool {node_pool} is busy; retry later.")
        return EX_TEMPFAIL
    if status is Status.NOT_CHANGED:
        print(f"Node pool {node_pool} does not exist; nothing to do.")
    else:
        print(f"Deletion of node pool {node_pool} started.")
    return 0


@app.default
def main(
    manifest: Annotated[Path | None, Parameter(help="GKEClusterConfig manifest.")] = None,
    project_id: Annotated[str | None, Parameter(help="Google Cloud project.")] = None,
    region: Annotated[str | None, Parameter(help="Cluster region.")] = None,
    zone: Annotated[str | None, Parameter(help="Cluster zone; wins over region.")] = None,
    cluster_name: Annotated[str | None, Parameter(help="Cluster name.")] = None,
    node_pool: Annotated[str | None, Parameter(help="Delete only this node pool.")] = None,
    backoff_seconds: Annotated[float | None, Parameter(help="Seconds between retries.")] = None,
    backoff_steps: Annotated[int | None, Parameter(help="Maximum delete attempts.")] = None,
    gcloud: Annotated[str | None, Parameter(help="gcloud executable.")] = None,
    verbose: bool = False,
) -> int:
    """Delete a GKE cluster, or a single node pool with --node-pool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    inputs = resolve_removal_inputs(
        RawRemovalInputs(
            manifest=manifest,
            project_id=project_id,
            region=region,
            zone=zone,
            cluster_name=cluster_name,
            node_pool=node_pool,
            backoff_seconds=backoff_seconds,
            backoff_steps=backoff_steps,
            gcloud=gcloud,
        )
    )
    reconciler = LifecycleReconciler(build_client(inputs.gcloud), backoff=inputs.backoff)
    spec = inputs.config.spec

    if inputs.node_pool is not None:
        return _remove_node_pool(reconciler, inputs.config, inputs.node_pool)

    print(f"Deleting cluster '{spec.cluster_name}' in {spec.zone or spec.region}...")
    print(f"  Project: {spec.project_id}")
    print(
        f"  Attempts: up to {inputs.backoff.steps}, "
        f"{inputs.backoff.duration:g}s apart"
    )

    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        reconciler.remove_cluster(inputs.config, cancel=cancel)
    except (GKELifecycleError, ValueError) as exc:
        logger.debug("Cluster delete failed", exc_info=True)
        print(f"error: failed to delete cluster: {exc}", file=sys.stderr)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous)

    print("\nCluster delete request accepted.")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
