"""Resolve command-line and environment inputs for the lifecycle tools.

Every option is taken from the CLI value first, then from its environment
variable, then from its default.
"""

from __future__ import annotations

import os
from collections import abc as cabc
from dataclasses import dataclass
from pathlib import Path

from ._cluster_manifest import load_cluster_config
from ._gke_backoff import BACKOFF_STEPS, WAIT_SECONDS, Backoff
from ._gke_models import GKEClusterConfig

MANIFEST_ENV = "GKE_CLUSTER_MANIFEST"


@dataclass(frozen=True, slots=True)
class InputResolution:
    """Where to look for an input that was not given on the command line."""

    env_key: str
    default: str | None = None
    required: bool = False


def resolve_input(
    param_value: str | None,
    resolution: InputResolution,
    env: cabc.Mapping[str, str] | None = None,
) -> str | None:
    """Resolve an input from the CLI value, the environment or the default.

    Examples
    --------
    >>> resolve_input(None, InputResolution("GKE_ZONE", default=""), env={})
    ''
    >>> resolve_input(None, InputResolution("GKE_ZONE"), env={"GKE_ZONE": "us-east1-b"})
    'us-east1-b'
    """
    if param_value is not None:
        return param_value

    env_value = (os.environ if env is None else env).get(resolution.env_key)
    if env_value:
        return env_value

    if resolution.required:
        msg = f"{resolution.env_key} is required"
        raise SystemExit(msg)

    return resolution.default


def _resolve_number(
    param_value: float | int | None,
    resolution: InputResolution,
    convert: cabc.Callable[[str], float | int],
    kind: str,
    env: cabc.Mapping[str, str] | None,
) -> float | int:
    if param_value is not None:
        return param_value
    raw = resolve_input(None, resolution, env)
    try:
        return convert(str(raw))
    except ValueError:
        msg = f"{resolution.env_key} must be {kind}, got {raw!r}"
        raise SystemExit(msg) from None


def backoff_from_inputs(
    seconds: float | None = None,
    steps: int | None = None,
    env: cabc.Mapping[str, str] | None = None,
) -> Backoff:
    """Build the cluster delete schedule from CLI values or the environment.

    Examples
    --------
    >>> backoff_from_inputs(env={"GKE_DELETE_BACKOFF_STEPS": "3"}).steps
    3
    """
    duration = _resolve_number(
        seconds,
        InputResolution("GKE_DELETE_BACKOFF_SECONDS", default=str(WAIT_SECONDS)),
        float,
        "a number",
        env,
    )
    attempts = _resolve_number(
        steps,
        InputResolution("GKE_DELETE_BACKOFF_STEPS", default=str(BACKOFF_STEPS)),
        int,
        "an integer",
        env,
    )
    try:
        return Backoff(duration=float(duration), steps=int(attempts))
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


@dataclass(frozen=True, slots=True)
class RawRemovalInputs:
    """Removal inputs as given on the command line."""

    manifest: Path | None = None
    project_id: str | None = None
    region: str | None = None
    zone: str | None = None
    cluster_name: str | None = None
    node_pool: str | None = None
    backoff_seconds: float | None = None
    backoff_steps: int | None = None
    gcloud: str | None = None


@dataclass(frozen=True, slots=True)
class RemovalInputs:
    """Resolved inputs for a cluster or node pool removal."""

    config: GKEClusterConfig
    node_pool: str | None
    backoff: Backoff
    gcloud: str


def resolve_manifest_path(
    param_value: Path | None,
    env: cabc.Mapping[str, str] | None = None,
    *,
    required: bool = False,
) -> Path | None:
    """Return the manifest path from the CLI or ``GKE_CLUSTER_MANIFEST``."""
    if param_value is not None:
        return param_value
    value = resolve_input(None, InputResolution(MANIFEST_ENV, required=required), env)
    return Path(value) if value else None


def _override_target(
    config: GKEClusterConfig,
    raw: RawRemovalInputs,
    env: cabc.Mapping[str, str] | None,
) -> None:
    spec = config.spec
    spec.project_id = resolve_input(
        raw.project_id, InputResolution("GKE_PROJECT_ID", default=spec.project_id), env
    ) or ""
    spec.region = resolve_input(
        raw.region, InputResolution("GKE_REGION", default=spec.region), env
    ) or ""
    spec.zone = resolve_input(
        raw.zone, InputResolution("GKE_ZONE", default=spec.zone), env
    ) or ""
    spec.cluster_name = resolve_input(
        raw.cluster_name,
        InputResolution("GKE_CLUSTER_NAME", default=spec.cluster_name),
        env,
    ) or ""

    missing = [
        env_key
        for env_key, value in (
            ("GKE_PROJECT_ID", spec.project_id),
            ("GKE_CLUSTER_NAME", spec.cluster_name),
            ("GKE_REGION or GKE_ZONE", spec.region or spec.zone),
        )
        if not value
    ]
    if missing:
        msg = f"{', '.join(missing)} is required"
        raise SystemExit(msg)


def resolve_removal_inputs(
    raw: RawRemovalInputs,
    env: cabc.Mapping[str, str] | None = None,
) -> RemovalInputs:
    """Resolve removal inputs from the manifest, CLI and environment.

    Values given on the command line or in the environment override the
    project, location and cluster name read from the manifest.

    Parameters
    ----------
    raw : RawRemovalInputs
        Values given on the command line.
    env : Mapping[str, str] | None, optional
        Environment to read; defaults to ``os.environ``.

    Returns
    -------
    RemovalInputs
        Configuration, optional node pool, backoff and gcloud binary.
    """
    manifest = resolve_manifest_path(raw.manifest, env)
    config = load_cluster_config(manifest) if manifest is not None else GKEClusterConfig()
    _override_target(config, raw, env)

    node_pool = resolve_input(raw.node_pool, InputResolution("GKE_NODE_POOL"), env)
    gcloud = resolve_input(raw.gcloud, InputResolution("GCLOUD_BIN", default="gcloud"), env)
    return RemovalInputs(
        config=config,
        node_pool=node_pool or None,
        backoff=backoff_from_inputs(raw.backoff_seconds, raw.backoff_steps, env),
        gcloud=gcloud or "gcloud",
    )
