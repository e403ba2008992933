"""Load ``GKEClusterConfig`` manifests into configuration snapshots.

Manifests use the custom resource's camelCase keys::

    apiVersion: gke.cattle.io/v1
    kind: GKEClusterConfig
    metadata:
      name: prod
      annotations:
        gke.cattle.io/security-compliance: "true"
    spec:
      projectID: acme
      region: us-central1
      clusterName: prod
      privateClusterConfig:
        enablePrivateNodes: true
      nodePools:
        - name: default-pool
          config:
            workloadMetadataConfig:
              mode: GKE_METADATA

Unknown keys are ignored; keys that are present must have the expected type.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

import yaml

from ._gke_errors import ClusterConfigError
from ._gke_models import (
    GKEBinaryAuthorization,
    GKEClientCertificateConfig,
    GKEClusterConfig,
    GKEClusterConfigSpec,
    GKEDatabaseEncryption,
    GKELegacyAbac,
    GKEMasterAuth,
    GKENodeConfig,
    GKENodePoolConfig,
    GKEPrivateClusterConfig,
    GKEShieldedInstanceConfig,
    GKEShieldedNodes,
    GKEWorkloadMetadataConfig,
    ObjectMeta,
)

MANIFEST_KIND = "GKEClusterConfig"

T = TypeVar("T")


def _mapping(data: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        msg = f"{path} must be a mapping, got {type(data).__name__}"
        raise ClusterConfigError(msg)
    return data


def _optional_mapping(data: Mapping[str, Any], key: str, path: str) -> Mapping[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    return _mapping(value, f"{path}.{key}")


def _str_field(data: Mapping[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{path}.{key} must be a string, got {type(value).__name__}"
        raise ClusterConfigError(msg)
    return value


def _optional_str_field(data: Mapping[str, Any], key: str, path: str) -> str | None:
    if data.get(key) is None:
        return None
    return _str_field(data, key, path)


def _bool_field(data: Mapping[str, Any], key: str, path: str) -> bool:
    return bool(_optional_bool_field(data, key, path))


def _optional_bool_field(data: Mapping[str, Any], key: str, path: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        msg = f"{path}.{key} must be a boolean, got {type(value).__name__}"
        raise ClusterConfigError(msg)
    return value


def _str_map_field(data: Mapping[str, Any], key: str, path: str) -> dict[str, str] | None:
    value = _optional_mapping(data, key, path)
    if value is None:
        return None
    result: dict[str, str] = {}
    for item_key, item_value in value.items():
        if not isinstance(item_key, str) or not isinstance(item_value, str):
            msg = f"{path}.{key} must map strings to strings (offending key {item_key!r})"
            raise ClusterConfigError(msg)
        result[item_key] = item_value
    return result


def _nested(
    data: Mapping[str, Any],
    key: str,
    path: str,
    build: Callable[[Mapping[str, Any], str], T],
) -> T | None:
    value = _optional_mapping(data, key, path)
    if value is None:
        return None
    return build(value, f"{path}.{key}")


def _private_cluster(data: Mapping[str, Any], path: str) -> GKEPrivateClusterConfig:
    return GKEPrivateClusterConfig(
        enable_private_nodes=_bool_field(data, "enablePrivateNodes", path),
    )


def _master_auth(data: Mapping[str, Any], path: str) -> GKEMasterAuth:
    return GKEMasterAuth(
        username=_str_field(data, "username", path),
        password=_str_field(data, "password", path),
        client_certificate_config=_nested(
            data,
            "clientCertificateConfig",
            path,
            lambda cert, cert_path: GKEClientCertificateConfig(
                issue_client_certificate=_bool_field(
                    cert, "issueClientCertificate", cert_path
                ),
            ),
        ),
    )


def _node_config(data: Mapping[str, Any], path: str) -> GKENodeConfig:
    return GKENodeConfig(
        shielded_instance_config=_nested(
            data,
            "shieldedInstanceConfig",
            path,
            lambda shielded, shielded_path: GKEShieldedInstanceConfig(
                enable_integrity_monitoring=_bool_field(
                    shielded, "enableIntegrityMonitoring", shielded_path
                ),
                enable_secure_boot=_bool_field(shielded, "enableSecureBoot", shielded_path),
            ),
        ),
        workload_metadata_config=_nested(
            data,
            "workloadMetadataConfig",
            path,
            lambda metadata, metadata_path: GKEWorkloadMetadataConfig(
                mode=_str_field(metadata, "mode", metadata_path),
            ),
        ),
    )


def _node_pools(data: Mapping[str, Any], path: str) -> list[GKENodePoolConfig]:
    value = data.get("nodePools")
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"{path}.nodePools must be a list, got {type(value).__name__}"
        raise ClusterConfigError(msg)
    pools: list[GKENodePoolConfig] = []
    for index, item in enumerate(value):
        item_path = f"{path}.nodePools[{index}]"
        pool = _mapping(item, item_path)
        pools.append(
            GKENodePoolConfig(
                name=_optional_str_field(pool, "name", item_path),
                config=_nested(pool, "config", item_path, _node_config),
            )
        )
    return pools


def _enabled(cls: Callable[..., T]) -> Callable[[Mapping[str, Any], str], T]:
    def build(data: Mapping[str, Any], path: str) -> T:
        return cls(enabled=_bool_field(data, "enabled", path))

    return build


def _spec(data: Mapping[str, Any], path: str) -> GKEClusterConfigSpec:
    return GKEClusterConfigSpec(
        project_id=_str_field(data, "projectID", path),
        region=_str_field(data, "region", path),
        zone=_str_field(data, "zone", path),
        cluster_name=_str_field(data, "clusterName", path),
        labels=_str_map_field(data, "labels", path),
        enable_kubernetes_alpha=_optional_bool_field(data, "enableKubernetesAlpha", path),
        private_cluster_config=_nested(data, "privateClusterConfig", path, _private_cluster),
        binary_authorization=_nested(
            data, "binaryAuthorization", path, _enabled(GKEBinaryAuthorization)
        ),
        shielded_nodes=_nested(data, "shieldedNodes", path, _enabled(GKEShieldedNodes)),
        legacy_abac=_nested(data, "legacyAbac", path, _enabled(GKELegacyAbac)),
        master_auth=_nested(data, "masterAuth", path, _master_auth),
        database_encryption=_nested(
            data,
            "databaseEncryption",
            path,
            lambda encryption, encryption_path: GKEDatabaseEncryption(
                state=_str_field(encryption, "state", encryption_path),
            ),
        ),
        node_pools=_node_pools(data, path),
    )


def cluster_config_from_mapping(data: Any) -> GKEClusterConfig:
    """Build a :class:`GKEClusterConfig` from a decoded manifest.

    Parameters
    ----------
    data : Any
        Decoded YAML or JSON document.

    Returns
    -------
    GKEClusterConfig
        Configuration snapshot for the reconciliation engine and validator.

    Raises
    ------
    ClusterConfigError
        If the document is not a ``GKEClusterConfig`` or a field has the
        wrong type.

    Examples
    --------
    >>> config = cluster_config_from_mapping(
    ...     {"kind": "GKEClusterConfig", "spec": {"clusterName": "prod"}}
    ... )
    >>> config.spec.cluster_name
    'prod'
    """
    document = _mapping(data, "manifest")
    kind = document.get("kind")
    if kind is not None and kind != MANIFEST_KIND:
        msg = f"Expected kind {MANIFEST_KIND!r}, got {kind!r}"
        raise ClusterConfigError(msg)

    metadata = _optional_mapping(document, "metadata", "manifest") or {}
    spec = _optional_mapping(document, "spec", "manifest") or {}
    return GKEClusterConfig(
        metadata=ObjectMeta(
            name=_str_field(metadata, "name", "metadata"),
            annotations=_str_map_field(metadata, "annotations", "metadata"),
        ),
        spec=_spec(spec, "spec"),
    )


def load_cluster_config(path: Path) -> GKEClusterConfig:
    """Read a ``GKEClusterConfig`` manifest from ``path``."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read cluster manifest {path}: {exc}"
        raise ClusterConfigError(msg) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in cluster manifest {path}: {exc}"
        raise ClusterConfigError(msg) from exc
    if data is None:
        msg = f"Cluster manifest {path} is empty"
        raise ClusterConfigError(msg)
    return cluster_config_from_mapping(data)
