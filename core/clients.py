# =============================================================================
# core/clients.py  —  Google Cloud SDK client factories
# =============================================================================
#
# Every SDK client the core layer uses is created through one of these
# functions.  Operations call them per invocation (no module-level client
# singletons, no cross-call state), and tests patch them to inject fakes.
#
# The Google Cloud Python clients are synchronous, and building one runs
# credential discovery (which may query the GCE metadata server).  Both the
# factories and the SDK calls therefore go through run_blocking(), which
# pushes the call onto a worker thread:
#
#     client = await clients.run_blocking(clients.instances_client)
# =============================================================================

import asyncio
from typing import Any, Callable, Optional

from google.cloud import compute_v1, resourcemanager_v3, spanner, storage


def instances_client() -> compute_v1.InstancesClient:
    return compute_v1.InstancesClient()


def zones_client() -> compute_v1.ZonesClient:
    return compute_v1.ZonesClient()


def storage_client(project: Optional[str] = None) -> storage.Client:
    return storage.Client(project=project)


def projects_client() -> resourcemanager_v3.ProjectsClient:
    return resourcemanager_v3.ProjectsClient()


def spanner_client(project: str) -> spanner.Client:
    return spanner.Client(project=project)


async def run_blocking(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking SDK call in a worker thread and await its result."""
    return await asyncio.to_thread(fn, *args, **kwargs)
