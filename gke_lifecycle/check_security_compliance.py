#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.12"
# dependencies = ["cyclopts>=2.9", "pyyaml"]
# ///
"""Check a GKEClusterConfig manifest against the security checklist.

The checklist only applies to clusters labelled ``compliance: security`` or
annotated ``gke.cattle.io/security-compliance: "true"``; pass --force to
check any manifest.

Exit status is 0 when compliant or not required, 1 on the first violation
and 2 when the manifest cannot be read.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from gke_lifecycle._cluster_manifest import load_cluster_config
from gke_lifecycle._gke_errors import ClusterConfigError
from gke_lifecycle._lifecycle_inputs import resolve_manifest_path
from gke_lifecycle._security_compliance import (
    find_security_violation,
    needs_security_compliance,
)

app = App(help="Check a GKEClusterConfig manifest against the security checklist.")
logger = logging.getLogger(__name__)


@app.default
def main(
    manifest: Annotated[Path | None, Parameter(help="GKEClusterConfig manifest.")] = None,
    force: Annotated[bool, Parameter(help="Check even when not required.")] = False,
    verbose: bool = False,
) -> int:
    """Validate the manifest and report the first violation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    path = resolve_manifest_path(manifest, required=True)
    try:
        config = load_cluster_config(path)
    except ClusterConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    name = config.spec.cluster_name or config.metadata.name or str(path)
    if not force and not needs_security_compliance(config):
        print(f"Security compliance not required for '{name}'; skipping.")
        return 0

    logger.debug("Checking %s against the security checklist", name)
    violation = find_security_violation(config)
    if violation is not None:
        print(f"error: cluster '{name}' is not compliant: {violation}", file=sys.stderr)
        return 1

    print(f"Cluster '{name}' meets the security compliance checklist.")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
