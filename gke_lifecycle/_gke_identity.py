"""Resource names for GKE clusters and node pools.

Names follow the Container API layout,
``projects/<project>/locations/<location>/clusters/<cluster>`` with an
optional ``/nodePools/<pool>`` suffix, and are used both to address the
remote API and to correlate log lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_RESOURCE_NAME_PATTERN = re.compile(
    r"^projects/(?P<project>[^/]+)/locations/(?P<location>[^/]+)"
    r"/clusters/(?P<cluster>[^/]+)(?:/nodePools/(?P<node_pool>[^/]+))?$"
)


@dataclass(frozen=True, slots=True)
class ResourceIdentity:
    """Parsed components of a cluster or node pool resource name."""

    project_id: str
    location: str
    cluster_name: str
    node_pool_name: str | None = None


def _check_component(value: str, field_name: str) -> str:
    if not value:
        msg = f"{field_name} must not be empty"
        raise ValueError(msg)
    if "/" in value:
        msg = f"{field_name} must not contain '/': {value!r}"
        raise ValueError(msg)
    return value


def location(region: str, zone: str) -> str:
    """Return the zone when one is set, otherwise the region.

    Examples
    --------
    >>> location("us-central1", "")
    'us-central1'
    >>> location("us-central1", "us-central1-a")
    'us-central1-a'
    """
    if zone:
        return zone
    return region


def cluster_rrn(project_id: str, location_name: str, cluster_name: str) -> str:
    """Build the relative resource name of a cluster.

    Parameters
    ----------
    project_id : str
        Google Cloud project identifier.
    location_name : str
        Region or zone hosting the cluster.
    cluster_name : str
        Cluster name.

    Returns
    -------
    str
        ``projects/<project>/locations/<location>/clusters/<cluster>``.

    Raises
    ------
    ValueError
        If a component is empty or contains ``/``.

    Examples
    --------
    >>> cluster_rrn("acme", "us-central1", "prod")
    'projects/acme/locations/us-central1/clusters/prod'
    """
    return "projects/{}/locations/{}/clusters/{}".format(
        _check_component(project_id, "project_id"),
        _check_component(location_name, "location"),
        _check_component(cluster_name, "cluster_name"),
    )


def node_pool_rrn(
    project_id: str,
    location_name: str,
    cluster_name: str,
    node_pool_name: str,
) -> str:
    """Build the relative resource name of a node pool.

    Examples
    --------
    >>> node_pool_rrn("acme", "us-central1", "prod", "default-pool")
    'projects/acme/locations/us-central1/clusters/prod/nodePools/default-pool'
    """
    base = cluster_rrn(project_id, location_name, cluster_name)
    return f"{base}/nodePools/{_check_component(node_pool_name, 'node_pool_name')}"


def parse_resource_name(name: str) -> ResourceIdentity:
    """Split a cluster or node pool resource name into its components.

    Examples
    --------
    >>> parse_resource_name("projects/acme/locations/eu-west1/clusters/prod").cluster_name
    'prod'
    """
    match = _RESOURCE_NAME_PATTERN.match(name)
    if match is None:
        msg = f"Not a GKE cluster or node pool resource name: {name!r}"
        raise ValueError(msg)
    return ResourceIdentity(
        project_id=match["project"],
        location=match["location"],
        cluster_name=match["cluster"],
        node_pool_name=match["node_pool"],
    )
