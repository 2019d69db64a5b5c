# =============================================================================
# core/storage.py  —  Cloud Storage operations for static sites
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Bucket create / list / delete and "upload one HTML object and make it
#   public".  The small helpers (create_bucket, enable_uniform_access,
#   upload_site_html, delete_bucket, delete_object) raise on failure and are
#   reused as saga steps by core/deploy.py; the @reports_errors coroutines
#   are the tool-facing versions.
#
# UNIFORM ACCESS:
#   Site buckets get uniform bucket-level access switched on right after
#   creation (a second, separate metadata PATCH call).  If that PATCH fails,
#   create_site_bucket deletes the new bucket again before re-raising.
#
# PROJECT:
#   Bucket names are global, so upload and delete accept project=None;
#   storage.Client(project=None) is then built without any project.
# =============================================================================

import logging
from typing import Optional

from core import clients
from core.models import BucketView, ToolResult
from core.results import error_message, reports_errors

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "US"
DEFAULT_FILE_NAME = "index.html"
HTML_CONTENT_TYPE = "text/html"

def public_url(bucket_name: str, file_name: str) -> str:
    return f"https://storage.googleapis.com/{bucket_name}/{file_name}"

# -----------------------------------------------------------------------------
# Raising helpers
# -----------------------------------------------------------------------------
async def create_bucket(project: str, bucket_name: str, location: str = DEFAULT_LOCATION):
    client = await clients.run_blocking(clients.storage_client, project)
    bucket = await clients.run_blocking(client.create_bucket, bucket_name, location=location)
    logger.info("Created bucket %s in %s", bucket_name, location)
    return bucket

async def enable_uniform_access(bucket) -> None:
    bucket.iam_configuration.uniform_bucket_level_access_enabled = True
    await clients.run_blocking(bucket.patch)

async def create_site_bucket(project: str, bucket_name: str, location: str = DEFAULT_LOCATION):
    """Create a bucket with uniform access on; no bucket is left behind if setup fails."""
    bucket = await create_bucket(project, bucket_name, location)
    try:
        await enable_uniform_access(bucket)
    except Exception:
        try:
            await delete_bucket(project, bucket_name, force=True)
        except Exception as cleanup_error:
            logger.warning(
                "Could not delete bucket %s after failed setup: %s",
                bucket_name, error_message(cleanup_error),
            )
        raise
    return bucket

async def upload_site_html(
    project: Optional[str], bucket_name: str, html_content: str, file_name: str = DEFAULT_FILE_NAME
) -> str:
    """Upload html_content as a public text/html object; returns its public URL."""
    client = await clients.run_blocking(clients.storage_client, project)
    blob = client.bucket(bucket_name).blob(file_name)
    await clients.run_blocking(
        blob.upload_from_string, html_content, content_type=HTML_CONTENT_TYPE
    )
    await clients.run_blocking(blob.make_public)
    return public_url(bucket_name, file_name)

async def delete_object(project: Optional[str], bucket_name: str, file_name: str) -> None:
    client = await clients.run_blocking(clients.storage_client, project)
    await clients.run_blocking(client.bucket(bucket_name).blob(file_name).delete)

async def delete_bucket(project: Optional[str], bucket_name: str, force: bool = False) -> None:
    client = await clients.run_blocking(clients.storage_client, project)
    await clients.run_blocking(client.bucket(bucket_name).delete, force=force)

# -----------------------------------------------------------------------------
# Tool-facing operations
# -----------------------------------------------------------------------------
@reports_errors("Creating Bucket", "Failed to create bucket {bucket_name}")
async def create_static_site_bucket(
    project: str, bucket_name: str, location: str = DEFAULT_LOCATION
) -> ToolResult:
    await create_site_bucket(project, bucket_name, location)
    return ToolResult.ok(f"# Bucket Created\n\nBucket {bucket_name} created in {location}")

@reports_errors("Uploading HTML", "Failed to upload {file_name} to {bucket_name}")
async def upload_static_site_html(
    project: Optional[str], bucket_name: str, html_content: str, file_name: str = DEFAULT_FILE_NAME
) -> ToolResult:
    url = await upload_site_html(project, bucket_name, html_content, file_name)
    return ToolResult.ok(f"# Upload Successful\n\nFile uploaded and public at {url}")

@reports_errors("Listing Buckets")
async def list_static_site_buckets(project: str) -> ToolResult:
    client = await clients.run_blocking(clients.storage_client, project)
    buckets = await clients.run_blocking(lambda: list(client.list_buckets(project=project)))
    names = "\n".join(view.name for view in map(BucketView.from_api, buckets) if view.name)
    return ToolResult.ok(f"# Buckets\n\n{names or '(none)'}")

@reports_errors("Deleting Bucket", "Failed to delete bucket {bucket_name}")
async def delete_static_site_bucket(project: Optional[str], bucket_name: str) -> ToolResult:
    await delete_bucket(project, bucket_name)
    return ToolResult.ok(f"# Bucket Deleted\n\nBucket {bucket_name} deleted")
