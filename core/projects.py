# =============================================================================
# core/projects.py  —  Project discovery (Resource Manager v3)
# =============================================================================

from itertools import islice
from typing import Optional

from google.cloud import resourcemanager_v3

from core import clients
from core.models import ProjectView, ToolResult
from core.results import reports_errors

DEFAULT_PAGE_SIZE = 200


@reports_errors("Listing Projects")
async def list_project_ids(
    filter_expr: Optional[str] = None, page_size: int = DEFAULT_PAGE_SIZE
) -> ToolResult:
    """Every project the caller can see, one id per line.

    filter_expr uses the searchProjects query syntax, e.g. "state:ACTIVE".
    """
    client = await clients.run_blocking(clients.projects_client)
    request = resourcemanager_v3.SearchProjectsRequest(page_size=page_size)
    if filter_expr:
        request.query = filter_expr

    projects = await clients.run_blocking(
        lambda: list(islice(client.search_projects(request=request), page_size))
    )
    if not projects:
        return ToolResult.ok("# Projects\n\nNo projects found.")

    ids = "\n".join(view.project_id for view in map(ProjectView.from_api, projects) if view.project_id)
    return ToolResult.ok(f"# Project IDs\n\n{ids}")
