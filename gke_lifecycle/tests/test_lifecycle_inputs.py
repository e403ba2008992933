"""Unit tests for CLI and environment input resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from gke_lifecycle._gke_backoff import DEFAULT_BACKOFF
from gke_lifecycle._lifecycle_inputs import (
    InputResolution,
    RawRemovalInputs,
    backoff_from_inputs,
    resolve_input,
    resolve_removal_inputs,
)

MANIFEST = """\
kind: GKEClusterConfig
metadata:
  name: prod
spec:
  projectID: manifest-project
  region: europe-west2
  clusterName: manifest-cluster
"""


def test_resolve_input_prefers_cli_value() -> None:
    resolution = InputResolution("GKE_REGION", default="us-east1")
    assert resolve_input("cli", resolution, env={"GKE_REGION": "env"}) == "cli"
    assert resolve_input(None, resolution, env={"GKE_REGION": "env"}) == "env"
    assert resolve_input(None, resolution, env={}) == "us-east1"


def test_resolve_input_required_missing() -> None:
    with pytest.raises(SystemExit, match="GKE_PROJECT_ID is required"):
        resolve_input(None, InputResolution("GKE_PROJECT_ID", required=True), env={})


def test_backoff_defaults_match_reference_policy() -> None:
    assert backoff_from_inputs(env={}) == DEFAULT_BACKOFF


def test_backoff_from_environment_and_cli() -> None:
    env = {"GKE_DELETE_BACKOFF_SECONDS": "2.5", "GKE_DELETE_BACKOFF_STEPS": "4"}
    assert backoff_from_inputs(env=env).duration == 2.5
    assert backoff_from_inputs(steps=9, env=env).steps == 9, "CLI should override env"


@pytest.mark.parametrize(
    ("env", "message"),
    [
        ({"GKE_DELETE_BACKOFF_STEPS": "many"}, "GKE_DELETE_BACKOFF_STEPS must be an integer"),
        ({"GKE_DELETE_BACKOFF_SECONDS": "soon"}, "GKE_DELETE_BACKOFF_SECONDS must be a number"),
        ({"GKE_DELETE_BACKOFF_STEPS": "0"}, "backoff steps must be at least 1"),
    ],
)
def test_backoff_rejects_bad_values(env: dict[str, str], message: str) -> None:
    with pytest.raises(SystemExit, match=message):
        backoff_from_inputs(env=env)


def test_resolve_removal_inputs_from_manifest_with_overrides(tmp_path: Path) -> None:
    manifest = tmp_path / "cluster.yaml"
    manifest.write_text(MANIFEST, encoding="utf-8")
    env = {"GKE_ZONE": "europe-west2-b", "GKE_NODE_POOL": "gpu"}

    inputs = resolve_removal_inputs(
        RawRemovalInputs(manifest=manifest, cluster_name="cli-cluster"),
        env=env,
    )

    spec = inputs.config.spec
    assert spec.project_id == "manifest-project", "Manifest value should be kept"
    assert spec.cluster_name == "cli-cluster", "CLI should override manifest"
    assert spec.zone == "europe-west2-b", "Environment should fill zone"
    assert spec.region == "europe-west2"
    assert inputs.node_pool == "gpu"
    assert inputs.gcloud == "gcloud"


def test_resolve_removal_inputs_from_environment_only() -> None:
    env = {
        "GKE_PROJECT_ID": "acme",
        "GKE_REGION": "us-central1",
        "GKE_CLUSTER_NAME": "prod",
        "GCLOUD_BIN": "/opt/google-cloud-sdk/bin/gcloud",
    }

    inputs = resolve_removal_inputs(RawRemovalInputs(), env=env)

    assert inputs.config.spec.cluster_name == "prod"
    assert inputs.node_pool is None
    assert inputs.gcloud == "/opt/google-cloud-sdk/bin/gcloud"


def test_resolve_removal_inputs_reports_missing_target() -> None:
    with pytest.raises(SystemExit, match="GKE_PROJECT_ID, GKE_REGION or GKE_ZONE is required"):
        resolve_removal_inputs(RawRemovalInputs(cluster_name="prod"), env={})
