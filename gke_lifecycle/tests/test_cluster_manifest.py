"""Unit tests for GKEClusterConfig manifest loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from gke_lifecycle._cluster_manifest import cluster_config_from_mapping, load_cluster_config
from gke_lifecycle._gke_errors import ClusterConfigError
from gke_lifecycle._security_compliance import find_security_violation, needs_security_compliance

COMPLIANT_MANIFEST = """\
apiVersion: gke.cattle.io/v1
kind: GKEClusterConfig
metadata:
  name: test-cluster
  namespace: cattle-global-data
  annotations:
    gke.cattle.io/security-compliance: "true"
spec:
  projectID: test-project
  region: us-central1
  clusterName: test-security-cluster
  enableKubernetesAlpha: false
  labels:
    team: platform
  privateClusterConfig:
    enablePrivateEndpoint: true
    enablePrivateNodes: true
    masterIpv4CidrBlock: 172.16.0.0/28
  binaryAuthorization:
    enabled: true
  shieldedNodes:
    enabled: true
  legacyAbac:
    enabled: false
  masterAuth:
    username: ""
    password: ""
    clientCertificateConfig:
      issueClientCertificate: false
  databaseEncryption:
    state: ENCRYPTED
    keyName: projects/test/locations/us-central1/keyRings/ring/cryptoKeys/key
  nodePools:
    - name: default-pool
      version: 1.28.5-gke.1217000
      initialNodeCount: 3
      config:
        imageType: COS_CONTAINERD
        shieldedInstanceConfig:
          enableIntegrityMonitoring: true
          enableSecureBoot: true
        workloadMetadataConfig:
          mode: GKE_METADATA
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "cluster.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_compliant_manifest(tmp_path: Path) -> None:
    config = load_cluster_config(_write(tmp_path, COMPLIANT_MANIFEST))

    assert config.metadata.name == "test-cluster"
    assert config.spec.project_id == "test-project"
    assert config.spec.cluster_name == "test-security-cluster"
    assert config.spec.enable_kubernetes_alpha is False
    assert config.spec.labels == {"team": "platform"}
    pool = config.spec.node_pools[0]
    assert pool.name == "default-pool"
    assert pool.config is not None and pool.config.workload_metadata_config is not None
    assert pool.config.workload_metadata_config.mode == "GKE_METADATA"
    assert needs_security_compliance(config) is True, "Annotation should opt in"
    assert find_security_violation(config) is None, "Manifest should be compliant"


def test_missing_sections_stay_absent() -> None:
    config = cluster_config_from_mapping({"spec": {"clusterName": "bare"}})

    assert config.spec.private_cluster_config is None
    assert config.spec.master_auth is None
    assert config.spec.node_pools == []
    assert config.metadata.annotations is None


def test_node_pool_without_config() -> None:
    config = cluster_config_from_mapping({"spec": {"nodePools": [{"name": "np"}]}})
    assert config.spec.node_pools[0].config is None


def test_wrong_kind_is_rejected() -> None:
    with pytest.raises(ClusterConfigError, match="Expected kind 'GKEClusterConfig'"):
        cluster_config_from_mapping({"kind": "AKSClusterConfig", "spec": {}})


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ([], "manifest must be a mapping"),
        ({"spec": {"enableKubernetesAlpha": "yes"}}, r"spec.enableKubernetesAlpha must be a boolean"),
        ({"spec": {"clusterName": 7}}, r"spec.clusterName must be a string"),
        ({"spec": {"nodePools": {"name": "np"}}}, r"spec.nodePools must be a list"),
        (
            {"spec": {"nodePools": [{"name": 3}]}},
            r"spec.nodePools\[0\].name must be a string",
        ),
        ({"spec": {"labels": {"tier": 1}}}, r"spec.labels must map strings to strings"),
        (
            {"spec": {"masterAuth": {"clientCertificateConfig": "off"}}},
            r"spec.masterAuth.clientCertificateConfig must be a mapping",
        ),
    ],
)
def test_invalid_field_types(document: object, message: str) -> None:
    with pytest.raises(ClusterConfigError, match=message):
        cluster_config_from_mapping(document)


def test_load_rejects_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(ClusterConfigError, match="Invalid YAML"):
        load_cluster_config(_write(tmp_path, "spec: [unterminated\n"))


def test_load_rejects_empty_file(tmp_path: Path) -> None:
    with pytest.raises(ClusterConfigError, match="is empty"):
        load_cluster_config(_write(tmp_path, ""))


def test_load_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ClusterConfigError, match="Cannot read cluster manifest"):
        load_cluster_config(tmp_path / "missing.yaml")


def test_load_reports_undecodable_file(tmp_path: Path) -> None:
    path = tmp_path / "cluster.yaml"
    path.write_bytes(b"spec:\n  clusterName: \xff\xfe\n")

    with pytest.raises(ClusterConfigError, match="Cannot read cluster manifest"):
        load_cluster_config(path)
