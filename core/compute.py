# =============================================================================
# core/compute.py  —  Compute Engine operations
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Instance lifecycle (list / create / delete / start / stop), IP lookups,
#   and the single-VM static site deploy.  Every public coroutine:
#     - takes an already-resolved project id (see core/config.py)
#     - awaits its SDK calls one after another (run_blocking)
#     - returns a ToolResult holding a Markdown report
#
# LISTING WITHOUT A ZONE:
#   The Compute API lists instances per zone, so "all instances" is one
#   zones.list call followed by one instances.list call PER ZONE, run
#   sequentially.  Slow for big projects, but simple and predictable.
#
# STATIC SITE DEPLOY:
#   The HTML is base64-encoded before it is embedded in the startup script,
#   so quotes, `$` and backticks in user content never reach the shell.
# =============================================================================

import base64
import json
import logging
import textwrap
from itertools import islice
from typing import Any, Optional

from google.api_core.exceptions import NotFound
from google.cloud import compute_v1

from core import clients
from core.models import InstanceView, ToolResult, ZoneView
from core.results import error_message, error_result, reports_errors

logger = logging.getLogger(__name__)

DEFAULT_MACHINE_TYPE = "e2-medium"
DEFAULT_IMAGE = "projects/debian-cloud/global/images/family/debian-11"
DEFAULT_NETWORK = "global/networks/default"
DEFAULT_PAGE_SIZE = 50

SITE_MACHINE_TYPE = "e2-micro"
SITE_IMAGE = "projects/debian-cloud/global/images/family/debian-12"
SITE_NETWORK_TAG = "http-server"
STARTUP_SCRIPT_KEY = "startup-script"
STORAGE_READ_ONLY_SCOPE = "https://www.googleapis.com/auth/devstorage.read_only"


def machine_type_path(zone: str, machine_type: str) -> str:
    return f"zones/{zone}/machineTypes/{machine_type}"


# =============================================================================
# Formatting
# =============================================================================
def format_instance(view: InstanceView) -> str:
    """One Markdown bullet per instance, with SSH hints when it has a public IP."""
    networks = ", ".join(view.networks) if view.networks else "none"
    ips = ", ".join(view.external_ips) if view.external_ips else "none"
    line = (
        f"- **{view.name}** ({view.zone}) — {view.status} — {view.machine_type}"
        f" — networks: {networks} — external IPs: {ips}"
    )
    if view.external_ips:
        line += (
            f"\n    SSH (gcloud): `gcloud compute ssh {view.name} --zone {view.zone}`"
            f"\n    SSH (direct): `ssh <USERNAME>@{view.external_ips[0]}`"
        )
    return line


def operation_echo(operation: Any, **details: str) -> str:
    payload = {"operation": getattr(operation, "name", None), **details}
    return json.dumps(payload, default=str)


# =============================================================================
# Discovery helpers (shared with probes and the instances resource)
# =============================================================================
async def list_zones(project: str) -> list[ZoneView]:
    client = await clients.run_blocking(clients.zones_client)
    zones = await clients.run_blocking(lambda: list(client.list(project=project)))
    return [view for view in map(ZoneView.from_api, zones) if view.name]


async def list_zone_instances(
    project: str,
    zone: str,
    page_size: Optional[int] = None,
    filter_expr: Optional[str] = None,
) -> list[InstanceView]:
    """Instances in one zone, capped at page_size when given."""
    client = await clients.run_blocking(clients.instances_client)
    request = compute_v1.ListInstancesRequest(project=project, zone=zone)
    if page_size:
        request.max_results = page_size
    if filter_expr:
        request.filter = filter_expr

    def fetch() -> list:
        pager = client.list(request=request)
        return list(islice(pager, page_size) if page_size else pager)

    instances = await clients.run_blocking(fetch)
    return [InstanceView.from_api(i) for i in instances]


async def list_project_instances(
    project: str, filter_expr: Optional[str] = None, page_size: Optional[int] = None
) -> list[InstanceView]:
    """Instances across every zone of the project (1 + N sequential calls)."""
    found: list[InstanceView] = []
    for zone in await list_zones(project):
        found.extend(await list_zone_instances(project, zone.name, page_size, filter_expr))
    return found


# =============================================================================
# Instance lifecycle tools
# =============================================================================
@reports_errors("Listing Instances")
async def list_instances(
    project: str,
    zone: Optional[str] = None,
    filter_expr: Optional[str] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ToolResult:
    if zone:
        views = await list_zone_instances(project, zone, page_size, filter_expr)
        if not views:
            return ToolResult.ok(f"# Instances in {zone}\n\nNo instances found in zone {zone}")
        body = "\n".join(format_instance(v) for v in views)
        return ToolResult.ok(f"# Instances in {zone}\n\n{body}")

    views = await list_project_instances(project, filter_expr, page_size)
    if not views:
        return ToolResult.ok(f"# Instances\n\nNo instances found in project {project}")
    body = "\n".join(format_instance(v) for v in views)
    return ToolResult.ok(f"# Instances\n\nProject: {project}\n\n{body}")


@reports_errors("Deleting Instance", "Failed to delete instance {name}")
async def delete_instance(project: str, name: str, zone: str) -> ToolResult:
    client = await clients.run_blocking(clients.instances_client)
    await clients.run_blocking(client.delete, project=project, zone=zone, instance=name)
    return ToolResult.ok(
        f"# Delete Started\n\nDeletion request submitted for instance: {name} in zone {zone}"
    )


def build_instance(
    name: str,
    zone: str,
    machine_type: str = DEFAULT_MACHINE_TYPE,
    image: str = DEFAULT_IMAGE,
    network: str = DEFAULT_NETWORK,
    startup_script: Optional[str] = None,
    external_ip: bool = False,
    tags: Optional[list[str]] = None,
    scopes: Optional[list[str]] = None,
) -> compute_v1.Instance:
    """Assemble the Instance resource sent to instances.insert."""
    nic = compute_v1.NetworkInterface(network=network)
    if external_ip:
        nic.access_configs = [
            compute_v1.AccessConfig(name="External NAT", type_="ONE_TO_ONE_NAT")
        ]

    instance = compute_v1.Instance(
        name=name,
        machine_type=machine_type_path(zone, machine_type),
        disks=[
            compute_v1.AttachedDisk(
                boot=True,
                auto_delete=True,
                initialize_params=compute_v1.AttachedDiskInitializeParams(
                    source_image=image
                ),
            )
        ],
        network_interfaces=[nic],
    )
    if startup_script:
        instance.metadata = compute_v1.Metadata(
            items=[compute_v1.Items(key=STARTUP_SCRIPT_KEY, value=startup_script)]
        )
    if tags:
        instance.tags = compute_v1.Tags(items=tags)
    if scopes:
        instance.service_accounts = [
            compute_v1.ServiceAccount(email="default", scopes=scopes)
        ]
    return instance


async def insert_instance(project: str, zone: str, instance: compute_v1.Instance) -> Any:
    client = await clients.run_blocking(clients.instances_client)
    return await clients.run_blocking(
        client.insert, project=project, zone=zone, instance_resource=instance
    )


@reports_errors("Creating Instance", "Failed to create instance {name}")
async def create_instance(
    project: str,
    name: str,
    zone: str,
    machine_type: str = DEFAULT_MACHINE_TYPE,
    image: str = DEFAULT_IMAGE,
    network: str = DEFAULT_NETWORK,
    startup_script: Optional[str] = None,
) -> ToolResult:
    instance = build_instance(name, zone, machine_type, image, network, startup_script)
    await insert_instance(project, zone, instance)
    return ToolResult.ok(
        f"# Instance Creation Started\n\nInstance {name} is being created in zone {zone}"
    )


async def _get_instance(project: str, zone: str, name: str) -> InstanceView:
    client = await clients.run_blocking(clients.instances_client)
    instance = await clients.run_blocking(
        client.get, project=project, zone=zone, instance=name
    )
    return InstanceView.from_api(instance)


@reports_errors("Getting Instance IPs", "Failed to fetch IPs for instance {name}")
async def get_instance_ip(project: str, name: str, zone: str) -> ToolResult:
    try:
        view = await _get_instance(project, zone, name)
    except NotFound:
        return ToolResult.error(
            f"# Instance Not Found\n\nNo instance named {name} found in zone {zone}"
        )

    ips_text = ", ".join(view.external_ips) if view.external_ips else "No external IPs found"
    gcloud_cmd = f"gcloud compute ssh {name} --zone {zone} --project {project}"
    direct_ssh = (
        f"ssh <USERNAME>@{view.external_ips[0]}"
        if view.external_ips
        else "No external IP to SSH directly"
    )
    return ToolResult.ok(
        f"# Instance: {name}\n\n"
        f"Status: {view.status}\n"
        f"External IPs: {ips_text}\n\n"
        f"Suggested SSH commands:\n- {gcloud_cmd}\n- {direct_ssh}"
    )


@reports_errors("Starting Instance", "Failed to start instance {name}")
async def start_instance(project: str, name: str, zone: str) -> ToolResult:
    client = await clients.run_blocking(clients.instances_client)
    await clients.run_blocking(client.start, project=project, zone=zone, instance=name)
    return ToolResult.ok(
        f"# Start Requested\n\nStart request submitted for instance {name} in zone {zone}"
    )


@reports_errors("Stopping Instance", "Failed to stop instance {name}")
async def stop_instance(project: str, name: str, zone: str) -> ToolResult:
    client = await clients.run_blocking(clients.instances_client)
    await clients.run_blocking(client.stop, project=project, zone=zone, instance=name)
    return ToolResult.ok(
        f"# Stop Requested\n\nStop request submitted for instance {name} in zone {zone}"
    )


@reports_errors("Getting VM Status", "Failed to get status for {vm_name}")
async def get_vm_status(project: str, zone: str, vm_name: str) -> ToolResult:
    view = await _get_instance(project, zone, vm_name)
    return ToolResult.ok(f"# VM Status\n\nInstance {vm_name} status: {view.status}")


@reports_errors("Getting VM IP", "Failed to fetch IP for {vm_name}")
async def get_vm_ip(project: str, zone: str, vm_name: str) -> ToolResult:
    view = await _get_instance(project, zone, vm_name)
    if not view.external_ips:
        return ToolResult.error(
            f"# No External IP\n\nInstance {vm_name} has no external IP assigned"
        )
    return ToolResult.ok(f"# Instance URL\n\nhttp://{view.external_ips[0]}")


# =============================================================================
# Static site on a single VM
# =============================================================================
def nginx_startup_script(html_content: str) -> str:
    """Startup script that installs nginx and writes the (base64) page to its docroot."""
    encoded = base64.b64encode(html_content.encode("utf-8")).decode("ascii")
    return textwrap.dedent(
        f"""\
        #!/bin/bash
        set -e
        apt-get update -y
        apt-get install -y nginx
        mkdir -p /var/www/html
        echo "{encoded}" | base64 -d > /var/www/html/index.html
        systemctl restart nginx || service nginx restart || true
        """
    )


def bucket_sync_startup_script(bucket_name: str) -> str:
    """Startup script that installs nginx + Cloud SDK and mirrors a bucket into the docroot."""
    return textwrap.dedent(
        f"""\
        #!/bin/bash
        set -e
        apt-get update -y
        apt-get install -y nginx google-cloud-sdk || (apt-get install -y python3-pip && pip install gsutil)
        mkdir -p /var/www/html
        if command -v gsutil >/dev/null 2>&1; then
          gsutil -m rsync -r gs://{bucket_name} /var/www/html || true
        else
          echo "gsutil not found, sync skipped" >/var/log/startup-script.log
        fi
        systemctl restart nginx || service nginx restart || true
        """
    )


def static_site_instance(
    vm_name: str, zone: str, startup_script: str, scopes: Optional[list[str]] = None
) -> compute_v1.Instance:
    return build_instance(
        vm_name,
        zone,
        machine_type=SITE_MACHINE_TYPE,
        image=SITE_IMAGE,
        startup_script=startup_script,
        external_ip=True,
        tags=[SITE_NETWORK_TAG],
        scopes=scopes,
    )


@reports_errors("Deploying Static Site", "Failed to deploy to {vm_name}")
async def deploy_static_html_site(
    project: str, zone: str, vm_name: str, html_content: str
) -> ToolResult:
    instance = static_site_instance(vm_name, zone, nginx_startup_script(html_content or ""))
    operation = await insert_instance(project, zone, instance)
    logger.info("Static site VM %s requested in %s/%s", vm_name, project, zone)
    return ToolResult.ok(
        f"# Deploy Started\n\nOperation: {operation_echo(operation, instance=vm_name, zone=zone)}"
    )


# =============================================================================
# Resource view
# =============================================================================
async def instances_report(project: str) -> str:
    """Plain-text instance listing for the gcp-compute:// resource.

    Unlike the tools, a failure here is reported as text without an error
    flag: resources have no error channel.
    """
    try:
        views = await list_project_instances(project)
    except Exception as e:
        message = error_message(e)
        logger.error("Error fetching instances for resource: %s", message)
        return error_result(
            "Fetching Instances", f"An error occurred while fetching instances: {message}"
        ).text

    if not views:
        return f"# Instances\n\nNo instances found in project {project}"
    body = "\n".join(f"- {v.name} ({v.zone}) — {v.status}" for v in views)
    return f"# Instances\n\nProject: {project}\n\n{body}"
