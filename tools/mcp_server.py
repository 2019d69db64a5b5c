# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines every MCP tool and resource the agent can call.  Each tool is a
#   thin wrapper around a core/ coroutine — it resolves the project, logs the
#   call, and turns the core ToolResult into MCP content.
#
# HOW IT WORKS (the flow):
#   1. The agent decides it needs something done (e.g., "list my VMs")
#   2. It calls a tool by name via MCP (e.g., "list-instances")
#   3. FastMCP validates the arguments against the signature below
#      (bounds come from pydantic Field) and routes the call here
#   4. The tool resolves the effective project (bucket upload and delete
#      skip this) and awaits the core/ operation
#   5. The ToolResult becomes text content; an error result becomes a
#      ToolError, which FastMCP reports with isError=true
#
# TOOL NAMING CONVENTIONS:
#   - list-* / get-*           → Read-only, safe to retry
#   - create-* / deploy-* /
#     upload-*                 → Create cloud resources (cost money!)
#   - start-* / stop-* /
#     delete-*                 → Change or destroy existing resources
#   Argument names are camelCase because they ARE the wire schema.
#
# RUNNING THIS SERVER:
#     a) Standalone:  python -m tools.mcp_server
#     b) As a subprocess of the ADK agent (agent/cloud_agent.py) over stdio
# =============================================================================

import logging
import sys
from typing import Annotated, Awaitable, Callable, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from core import compute, deploy, diagram, projects, storage
from core.config import ProjectNotConfigured, load_settings, resolve_project_async
from core.models import ToolResult
from core.results import error_message, error_result

# Environment first: GOOGLE_CLOUD_PROJECT etc. may live in a local .env file.
load_dotenv()
SETTINGS = load_settings()

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP server talks to the agent over STDOUT.
# Anything printed to stdout would corrupt the MCP JSON stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for successful responses
#     - YELLOW for status/progress and error results
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color

_MAX_LOGGED_VALUE = 80  # htmlContent can be huge; keep log lines readable

logging.basicConfig(
    level=SETTINGS.log_level,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _short(value: object) -> str:
    text = repr(value)
    if len(text) > _MAX_LOGGED_VALUE:
        return f"{text[:_MAX_LOGGED_VALUE]}...({len(text)} chars)"
    return text


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={_short(v)}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: ToolResult) -> ToolResult:
    """Log the first line of a successful result in GREEN, then return it."""
    headline = result.text.splitlines()[0] if result.text else ""
    logging.info(f"{_GREEN}  ← {tool_name} response: {headline}{_RESET}")
    return result


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP(SETTINGS.server_name)


async def _resolve(explicit: Optional[str] = None) -> str:
    return await resolve_project_async(explicit, SETTINGS)


def _deliver(tool_name: str, result: ToolResult) -> str:
    """Map a core ToolResult onto the MCP text result (or an MCP error)."""
    if result.is_error:
        _log_status(f"{tool_name} failed: {result.text.splitlines()[0]}")
        raise ToolError(result.text)
    _log_response(tool_name, result)
    return result.text


async def _invoke(
    tool_name: str, operation: Callable[[], Awaitable[ToolResult]], **params
) -> str:
    _log_request(tool_name, **params)
    try:
        result = await operation()
    except ProjectNotConfigured as e:
        result = error_result("Resolving Project", error_message(e))
    return _deliver(tool_name, result)


async def _invoke_in_project(
    tool_name: str,
    operation: Callable[[str], Awaitable[ToolResult]],
    projectId: Optional[str] = None,
    **params,
) -> str:
    """Like _invoke, but resolves the effective project and passes it to the operation."""

    async def run() -> ToolResult:
        return await operation(await _resolve(projectId))

    if projectId is not None:
        params["projectId"] = projectId
    return await _invoke(tool_name, run, **params)


# Reusable argument types
Zone = Annotated[str, Field(description="Zone of the instance (e.g., us-central1-a)")]
InstanceName = Annotated[str, Field(description="Instance name")]
VmName = Annotated[str, Field(description="VM name")]
OptionalProject = Annotated[
    Optional[str], Field(description="Project ID (optional, uses the default project if omitted)")
]


# =============================================================================
# COMPUTE ENGINE: instance lifecycle
# =============================================================================
@mcp.tool(name="list-instances")
async def list_instances(
    zone: Annotated[Optional[str], Field(description="Zone to list instances from (optional)")] = None,
    filter: Annotated[Optional[str], Field(description="Optional filter for the API")] = None,
    pageSize: Annotated[int, Field(ge=1, le=500, description="Maximum items")] = compute.DEFAULT_PAGE_SIZE,
) -> str:
    """List Compute Engine VM instances across the project or within a zone.

    Without a zone, every zone of the project is scanned (one call per zone),
    so prefer passing a zone when you know it.
    """
    return await _invoke_in_project(
        "list-instances",
        lambda project: compute.list_instances(project, zone, filter, pageSize),
        zone=zone, filter=filter, pageSize=pageSize,
    )


@mcp.tool(name="delete-instance")
async def delete_instance(name: InstanceName, zone: Zone) -> str:
    """Delete a Compute Engine VM instance by name and zone.

    DESTRUCTIVE: confirm with the user before calling this.
    """
    return await _invoke_in_project(
        "delete-instance",
        lambda project: compute.delete_instance(project, name, zone),
        name=name, zone=zone,
    )


@mcp.tool(name="create-instance")
async def create_instance(
    name: Annotated[str, Field(description="Name for the new instance")],
    zone: Zone,
    machineType: Annotated[str, Field(description="Machine type short name (e.g., e2-medium)")] = compute.DEFAULT_MACHINE_TYPE,
    image: Annotated[str, Field(description="Disk image to use")] = compute.DEFAULT_IMAGE,
    network: Annotated[str, Field(description="Network resource path")] = compute.DEFAULT_NETWORK,
    startupScript: Annotated[Optional[str], Field(description="Optional startup script to run on instance creation")] = None,
) -> str:
    """Create a Compute Engine VM instance with simple parameters."""
    return await _invoke_in_project(
        "create-instance",
        lambda project: compute.create_instance(
            project, name, zone, machineType, image, network, startupScript
        ),
        name=name, zone=zone, machineType=machineType, image=image,
        network=network, startupScript=startupScript,
    )


@mcp.tool(name="get-instance-ip")
async def get_instance_ip(name: InstanceName, zone: Zone) -> str:
    """Fetch external IP(s) for a VM and suggest SSH commands to reach it."""
    return await _invoke_in_project(
        "get-instance-ip",
        lambda project: compute.get_instance_ip(project, name, zone),
        name=name, zone=zone,
    )


@mcp.tool(name="start-instance")
async def start_instance(name: InstanceName, zone: Zone) -> str:
    """Start a stopped Compute Engine VM instance."""
    return await _invoke_in_project(
        "start-instance",
        lambda project: compute.start_instance(project, name, zone),
        name=name, zone=zone,
    )


@mcp.tool(name="stop-instance")
async def stop_instance(name: InstanceName, zone: Zone) -> str:
    """Stop a running Compute Engine VM instance."""
    return await _invoke_in_project(
        "stop-instance",
        lambda project: compute.stop_instance(project, name, zone),
        name=name, zone=zone,
    )


# =============================================================================
# COMPUTE ENGINE: static site on a VM
# =============================================================================
@mcp.tool(name="deploy-static-html-site")
async def deploy_static_html_site(
    zone: Annotated[str, Field(description="Zone for the instance (e.g., us-central1-a)")],
    vmName: Annotated[str, Field(description="Name for the VM")],
    htmlContent: Annotated[str, Field(description="HTML content to serve")],
    projectId: OptionalProject = None,
) -> str:
    """Create a VM whose startup script installs nginx and serves the given HTML.

    The page is written to /var/www/html/index.html on first boot.  Use
    get-vm-status and get-vm-ip afterwards to find out when it is reachable.
    """
    return await _invoke_in_project(
        "deploy-static-html-site",
        lambda project: compute.deploy_static_html_site(project, zone, vmName, htmlContent),
        zone=zone, vmName=vmName, htmlContent=htmlContent, projectId=projectId,
    )


@mcp.tool(name="get-vm-status")
async def get_vm_status(zone: Zone, vmName: VmName, projectId: OptionalProject = None) -> str:
    """Retrieve the status (RUNNING, TERMINATED, ...) of a Compute Engine VM."""
    return await _invoke_in_project(
        "get-vm-status",
        lambda project: compute.get_vm_status(project, zone, vmName),
        zone=zone, vmName=vmName, projectId=projectId,
    )


@mcp.tool(name="get-vm-ip")
async def get_vm_ip(zone: Zone, vmName: VmName, projectId: OptionalProject = None) -> str:
    """Fetch the external IP of a VM and return it as an http:// URL."""
    return await _invoke_in_project(
        "get-vm-ip",
        lambda project: compute.get_vm_ip(project, zone, vmName),
        zone=zone, vmName=vmName, projectId=projectId,
    )


# =============================================================================
# CLOUD STORAGE: static site buckets
# =============================================================================
@mcp.tool(name="create-static-site-bucket")
async def create_static_site_bucket(
    bucketName: Annotated[str, Field(description="Name for the bucket")],
    projectId: OptionalProject = None,
    location: Annotated[str, Field(description="Location for the bucket (default US)")] = storage.DEFAULT_LOCATION,
) -> str:
    """Create a Cloud Storage bucket for static site hosting (uniform bucket-level access)."""
    return await _invoke_in_project(
        "create-static-site-bucket",
        lambda project: storage.create_static_site_bucket(project, bucketName, location),
        bucketName=bucketName, projectId=projectId, location=location,
    )


@mcp.tool(name="upload-static-site-html")
async def upload_static_site_html(
    bucketName: Annotated[str, Field(description="Bucket name")],
    htmlContent: Annotated[str, Field(description="HTML content to upload")],
    fileName: Annotated[str, Field(description="File name (default index.html)")] = storage.DEFAULT_FILE_NAME,
) -> str:
    """Upload an HTML file to Cloud Storage and make it publicly readable."""
    # Bucket names are global: no project resolution, the client may run without one.
    return await _invoke(
        "upload-static-site-html",
        lambda: storage.upload_static_site_html(
            SETTINGS.default_project, bucketName, htmlContent, fileName
        ),
        bucketName=bucketName, htmlContent=htmlContent, fileName=fileName,
    )


@mcp.tool(name="list-static-site-buckets")
async def list_static_site_buckets(projectId: OptionalProject = None) -> str:
    """List Cloud Storage buckets in the project."""
    return await _invoke_in_project(
        "list-static-site-buckets",
        lambda project: storage.list_static_site_buckets(project),
        projectId=projectId,
    )


@mcp.tool(name="delete-static-site-bucket")
async def delete_static_site_bucket(
    bucketName: Annotated[str, Field(description="Bucket name")],
) -> str:
    """Delete a Cloud Storage bucket (it must be empty).

    DESTRUCTIVE: confirm with the user before calling this.
    """
    # Bucket names are global: no project resolution, the client may run without one.
    return await _invoke(
        "delete-static-site-bucket",
        lambda: storage.delete_static_site_bucket(SETTINGS.default_project, bucketName),
        bucketName=bucketName,
    )


@mcp.tool(name="deploy-static-site-from-html")
async def deploy_static_site_from_html(
    zone: Annotated[str, Field(description="Zone for the VM (e.g., us-central1-a)")],
    vmName: VmName,
    bucketName: Annotated[str, Field(description="Bucket name")],
    htmlContent: Annotated[str, Field(description="HTML content to deploy")],
    projectId: OptionalProject = None,
) -> str:
    """Create a bucket, upload the HTML, and provision a VM that serves the bucket via nginx.

    Runs as one unit: if a later step fails, the bucket and object created
    by earlier steps are removed again and the error lists what was undone.
    """
    return await _invoke_in_project(
        "deploy-static-site-from-html",
        lambda project: deploy.deploy_static_site_from_html(
            project, zone, vmName, bucketName, htmlContent
        ),
        zone=zone, vmName=vmName, bucketName=bucketName,
        htmlContent=htmlContent, projectId=projectId,
    )


# =============================================================================
# PROJECTS & ARCHITECTURE
# =============================================================================
@mcp.tool(name="list-project-ids")
async def list_project_ids(
    filter: Annotated[Optional[str], Field(description='Optional filter for projects (e.g., "state:ACTIVE")')] = None,
    pageSize: Annotated[int, Field(ge=1, le=1000, description="Maximum projects to return")] = projects.DEFAULT_PAGE_SIZE,
) -> str:
    """List all accessible Google Cloud project IDs."""
    return await _invoke(
        "list-project-ids",
        lambda: projects.list_project_ids(filter, pageSize),
        filter=filter, pageSize=pageSize,
    )


@mcp.tool(name="generate-gcp-mermaid-diagram")
async def generate_gcp_mermaid_diagram(
    projectId: Annotated[str, Field(description="GCP project ID")],
) -> str:
    """Generate a Mermaid architecture diagram of the services used by a GCP project.

    Services whose discovery fails are left out of the graph and listed in a
    diagnostics comment at the end of the diagram.
    """
    return await _invoke(
        "generate-gcp-mermaid-diagram",
        lambda: diagram.generate_gcp_mermaid_diagram(projectId),
        projectId=projectId,
    )


# =============================================================================
# RESOURCES
# =============================================================================
@mcp.resource(
    "gcp-compute://{project_id}/instances",
    name="gcp-compute-instances",
    mime_type="text/markdown",
)
async def compute_instances(project_id: str) -> str:
    """Compute Engine instances in a project, across all zones."""
    _log_request("gcp-compute-instances", project_id=project_id)
    return await compute.instances_report(await _resolve(project_id))


# =============================================================================
# Server entry point
# =============================================================================
def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
