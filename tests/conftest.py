import os
from unittest.mock import MagicMock, patch

# Must be set before tools.mcp_server is imported: it builds Settings at import.
os.environ.setdefault("GOOGLE_CLOUD_PROJECT", "test-project")

import pytest
from google.cloud import compute_v1


# --- Fake SDK clients ---------------------------------------------------------
# core.clients is the only place SDK clients are built, so patching its
# factories keeps every test off the network.

@pytest.fixture
def instances_client():
    client = MagicMock(name="InstancesClient")
    client.list.return_value = []
    with patch("core.clients.instances_client", return_value=client):
        yield client


@pytest.fixture
def zones_client():
    client = MagicMock(name="ZonesClient")
    client.list.return_value = [compute_v1.Zone(name="us-central1-a")]
    with patch("core.clients.zones_client", return_value=client):
        yield client


@pytest.fixture
def storage_client():
    client = MagicMock(name="StorageClient")
    client.list_buckets.return_value = []
    with patch("core.clients.storage_client", return_value=client) as factory:
        client.factory = factory
        yield client


@pytest.fixture
def projects_client():
    client = MagicMock(name="ProjectsClient")
    client.search_projects.return_value = []
    with patch("core.clients.projects_client", return_value=client):
        yield client


@pytest.fixture
def spanner_client():
    client = MagicMock(name="SpannerClient")
    client.list_instances.return_value = []
    with patch("core.clients.spanner_client", return_value=client):
        yield client


# --- Compute fixtures -----------------------------------------------------------

def make_instance(
    name="vm-1",
    zone="us-central1-a",
    status="RUNNING",
    machine_type="e2-medium",
    nat_ip="1.2.3.4",
):
    access_configs = [compute_v1.AccessConfig(nat_i_p=nat_ip)] if nat_ip else []
    return compute_v1.Instance(
        name=name,
        status=status,
        zone=f"https://www.googleapis.com/compute/v1/projects/test-project/zones/{zone}",
        machine_type=f"zones/{zone}/machineTypes/{machine_type}",
        network_interfaces=[
            compute_v1.NetworkInterface(
                network="global/networks/default", access_configs=access_configs
            )
        ],
    )


@pytest.fixture
def instance_factory():
    return make_instance
