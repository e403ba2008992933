"""Data models for GKE lifecycle reconciliation.

The configuration classes mirror the ``GKEClusterConfig`` custom resource.
They are owned by the caller and are read, never modified, by this package.

Examples
--------
>>> config = GKEClusterConfig(spec=GKEClusterConfigSpec(cluster_name="prod"))
>>> config.spec.node_pools
[]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Status(Enum):
    """Outcome of a single node pool reconciliation step."""

    NOT_CHANGED = "not-changed"
    CHANGED = "changed"
    RETRY = "retry"


@dataclass(slots=True)
class OperationAttempt:
    """One delete attempt within a reconciliation call.

    Attributes
    ----------
    ordinal
        1-based attempt number.
    started_at
        Monotonic clock reading taken when the attempt was issued.
    last_error
        Error raised by the remote call, if any.
    """

    ordinal: int
    started_at: float
    last_error: BaseException | None = None


@dataclass(slots=True)
class ObjectMeta:
    """Subset of Kubernetes object metadata read by the validator."""

    name: str = ""
    annotations: dict[str, str] | None = None


@dataclass(slots=True)
class GKEPrivateClusterConfig:
    enable_private_nodes: bool = False


@dataclass(slots=True)
class GKEBinaryAuthorization:
    enabled: bool = False


@dataclass(slots=True)
class GKEShieldedNodes:
    enabled: bool = False


@dataclass(slots=True)
class GKELegacyAbac:
    enabled: bool = False


@dataclass(slots=True)
class GKEClientCertificateConfig:
    issue_client_certificate: bool = False


@dataclass(slots=True)
class GKEMasterAuth:
    username: str = ""
    password: str = field(default="", repr=False)
    client_certificate_config: GKEClientCertificateConfig | None = None


@dataclass(slots=True)
class GKEDatabaseEncryption:
    state: str = ""


@dataclass(slots=True)
class GKEShieldedInstanceConfig:
    enable_integrity_monitoring: bool = False
    enable_secure_boot: bool = False


@dataclass(slots=True)
class GKEWorkloadMetadataConfig:
    mode: str = ""


@dataclass(slots=True)
class GKENodeConfig:
    """Machine level settings applied to every node in a pool."""

    shielded_instance_config: GKEShieldedInstanceConfig | None = None
    workload_metadata_config: GKEWorkloadMetadataConfig | None = None


@dataclass(slots=True)
class GKENodePoolConfig:
    """Desired state of a single node pool."""

    name: str | None = None
    config: GKENodeConfig | None = None


@dataclass(slots=True)
class GKEClusterConfigSpec:
    """Desired cluster state, including its security posture."""

    project_id: str = ""
    region: str = ""
    zone: str = ""
    cluster_name: str = ""
    labels: dict[str, str] | None = None
    enable_kubernetes_alpha: bool | None = None
    private_cluster_config: GKEPrivateClusterConfig | None = None
    binary_authorization: GKEBinaryAuthorization | None = None
    shielded_nodes: GKEShieldedNodes | None = None
    legacy_abac: GKELegacyAbac | None = None
    master_auth: GKEMasterAuth | None = None
    database_encryption: GKEDatabaseEncryption | None = None
    node_pools: list[GKENodePoolConfig] = field(default_factory=list)


@dataclass(slots=True)
class GKEClusterConfig:
    """A ``GKEClusterConfig`` resource: metadata plus desired spec."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: GKEClusterConfigSpec = field(default_factory=GKEClusterConfigSpec)
