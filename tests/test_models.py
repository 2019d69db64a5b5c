"""Tests for the view normalization in core/models.py."""

from types import SimpleNamespace

from google.cloud import compute_v1, resourcemanager_v3

from core.models import BucketView, InstanceView, ProjectView, ToolResult, ZoneView


def test_instance_view_from_api(instance_factory):
    view = InstanceView.from_api(instance_factory(name="web", zone="asia-east1-a", nat_ip="8.8.4.4"))

    assert view == InstanceView(
        name="web",
        zone="asia-east1-a",
        status="RUNNING",
        machine_type="e2-medium",
        networks=["global/networks/default"],
        external_ips=["8.8.4.4"],
    )


def test_instance_view_defaults_for_blank_instance():
    view = InstanceView.from_api(compute_v1.Instance())

    assert view.name == "unknown"
    assert view.zone == "unknown"
    assert view.status == "UNKNOWN"
    assert view.machine_type == "unknown"
    assert view.networks == []
    assert view.external_ips == []


def test_instance_view_collects_ips_from_every_interface():
    instance = compute_v1.Instance(
        name="multi",
        network_interfaces=[
            compute_v1.NetworkInterface(access_configs=[compute_v1.AccessConfig(nat_i_p="1.1.1.1")]),
            compute_v1.NetworkInterface(
                access_configs=[compute_v1.AccessConfig(), compute_v1.AccessConfig(nat_i_p="2.2.2.2")]
            ),
        ],
    )

    assert InstanceView.from_api(instance).external_ips == ["1.1.1.1", "2.2.2.2"]


def test_zone_and_bucket_views():
    assert ZoneView.from_api(compute_v1.Zone(name="us-west1-c")).name == "us-west1-c"
    assert BucketView.from_api(SimpleNamespace(name="b", location="EU")) == BucketView("b", "EU")
    assert BucketView.from_api(SimpleNamespace(name="b", location=None)).location == ""


def test_project_view_falls_back_to_resource_name():
    assert ProjectView.from_api(resourcemanager_v3.Project(project_id="alpha")).project_id == "alpha"
    assert ProjectView.from_api(resourcemanager_v3.Project(name="projects/1234")).project_id == "1234"


def test_tool_result_text_joins_blocks():
    result = ToolResult(text_blocks=["# A", "body"])

    assert result.text == "# A\n\nbody"
    assert ToolResult.ok("x").is_error is False
    assert ToolResult.error("x").is_error is True
