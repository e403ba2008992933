"""Security compliance checklist for GKE cluster configurations.

The checklist is evaluated in a fixed order and stops at the first failing
rule. Whether a cluster must pass it at all is decided separately by
:func:`needs_security_compliance`.

Examples
--------
>>> find_security_violation(GKEClusterConfig())
'private nodes must be enabled for security compliance'
"""

from __future__ import annotations

from ._gke_errors import SecurityComplianceError
from ._gke_models import GKEClusterConfig, GKEClusterConfigSpec, GKENodePoolConfig

COMPLIANCE_LABEL = "compliance"
COMPLIANCE_LABEL_VALUE = "security"
COMPLIANCE_ANNOTATION = "gke.cattle.io/security-compliance"
COMPLIANCE_ANNOTATION_VALUE = "true"

DATABASE_ENCRYPTED = "ENCRYPTED"
GKE_METADATA_MODE = "GKE_METADATA"


def _cluster_violation(spec: GKEClusterConfigSpec) -> str | None:
    if spec.enable_kubernetes_alpha:
        return "alpha features must be disabled for security compliance"

    private = spec.private_cluster_config
    if private is None or not private.enable_private_nodes:
        return "private nodes must be enabled for security compliance"

    if spec.binary_authorization is None or not spec.binary_authorization.enabled:
        return "binary authorization must be enabled for security compliance"

    if spec.shielded_nodes is None or not spec.shielded_nodes.enabled:
        return "shielded nodes must be enabled for security compliance"

    if spec.legacy_abac is not None and spec.legacy_abac.enabled:
        return "legacy ABAC must be disabled for security compliance"

    auth = spec.master_auth
    if auth is not None:
        if auth.username or auth.password:
            return "basic authentication must be disabled for security compliance"
        cert = auth.client_certificate_config
        if cert is not None and cert.issue_client_certificate:
            return "client certificate issuance must be disabled for security compliance"

    encryption = spec.database_encryption
    if encryption is None or encryption.state != DATABASE_ENCRYPTED:
        return "database encryption must be enabled for security compliance"

    return None


def _node_pool_violation(index: int, node_pool: GKENodePoolConfig) -> str | None:
    node_config = node_pool.config
    if node_config is None:
        return f"node pool {index} config cannot be nil for security compliance"

    shielded = node_config.shielded_instance_config
    if (
        shielded is None
        or not shielded.enable_integrity_monitoring
        or not shielded.enable_secure_boot
    ):
        return (
            f"node pool {index} must have shielded instance config with "
            "integrity monitoring and secure boot enabled"
        )

    metadata = node_config.workload_metadata_config
    if metadata is None or metadata.mode != GKE_METADATA_MODE:
        return f"node pool {index} must use GKE_METADATA mode for security compliance"

    return None


def find_security_violation(config: GKEClusterConfig) -> str | None:
    """Return the first security checklist violation, or ``None``.

    Parameters
    ----------
    config : GKEClusterConfig
        Cluster configuration snapshot to inspect.

    Returns
    -------
    str | None
        Reason describing the first failing rule, or ``None`` when the
        configuration is compliant.
    """
    violation = _cluster_violation(config.spec)
    if violation is not None:
        return violation
    for index, node_pool in enumerate(config.spec.node_pools):
        violation = _node_pool_violation(index, node_pool)
        if violation is not None:
            return violation
    return None


def validate_security_compliance(config: GKEClusterConfig) -> None:
    """Raise :class:`SecurityComplianceError` for the first violation found."""
    violation = find_security_violation(config)
    if violation is not None:
        raise SecurityComplianceError(violation)


def needs_security_compliance(config: GKEClusterConfig) -> bool:
    """Return whether ``config`` opts into the security checklist.

    A cluster opts in through the ``compliance: security`` label or the
    ``gke.cattle.io/security-compliance: "true"`` annotation. Values are
    matched exactly.

    Examples
    --------
    >>> needs_security_compliance(GKEClusterConfig())
    False
    """
    labels = config.spec.labels or {}
    if labels.get(COMPLIANCE_LABEL) == COMPLIANCE_LABEL_VALUE:
        return True
    annotations = config.metadata.annotations or {}
    return annotations.get(COMPLIANCE_ANNOTATION) == COMPLIANCE_ANNOTATION_VALUE
