# =============================================================================
# core/config.py  —  Runtime Settings & Project Resolution
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the handful of environment variables the server and the console
#   care about, ONCE, into a frozen Settings object.  Entry points call
#   load_dotenv() before load_settings(), so a local .env file works too.
#
# PROJECT RESOLUTION:
#   Most tools let the caller omit the project.  resolve_project() decides the
#   effective project at the tool boundary, and the result is passed down into
#   every core call explicitly:
#     1. an explicit, non-empty argument
#     2. Settings.default_project (GOOGLE_CLOUD_PROJECT / GCLOUD_PROJECT /
#        GCP_PROJECT_ID)
#     3. the project attached to Application Default Credentials
#   Step 3 can block on the GCE metadata server, so the tool layer calls
#   resolve_project_async(), which runs it on a worker thread.
# =============================================================================

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

import google.auth
from google.auth.exceptions import DefaultCredentialsError

logger = logging.getLogger(__name__)

_PROJECT_ENV_VARS = ("GOOGLE_CLOUD_PROJECT", "GCLOUD_PROJECT", "GCP_PROJECT_ID")


class ProjectNotConfigured(RuntimeError):
    """No project was passed and none could be found in the environment."""


@dataclass(frozen=True)
class Settings:
    default_project: Optional[str] = None
    log_level: str = "INFO"
    server_name: str = "gcp-cloud-ops"
    agent_model: str = "openrouter/openai/gpt-4o"


def load_settings(environ: Optional[dict] = None) -> Settings:
    """Build Settings from the process environment (or a supplied mapping)."""
    env = os.environ if environ is None else environ

    default_project = next(
        (env[name] for name in _PROJECT_ENV_VARS if env.get(name)), None
    )
    return Settings(
        default_project=default_project,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        server_name=env.get("MCP_SERVER_NAME", "gcp-cloud-ops"),
        agent_model=env.get("CLOUD_AGENT_MODEL", "openrouter/openai/gpt-4o"),
    )


def resolve_project(explicit: Optional[str], settings: Settings) -> str:
    """Return the project a tool call should act on.

    Raises:
        ProjectNotConfigured: if no source yields a project id.
    """
    if explicit:
        return explicit
    if settings.default_project:
        return settings.default_project

    try:
        _, adc_project = google.auth.default()
    except DefaultCredentialsError as e:
        raise ProjectNotConfigured(
            f"No project id supplied and no default credentials found: {e}"
        ) from e

    if not adc_project:
        raise ProjectNotConfigured(
            "No project id supplied. Pass projectId or set GOOGLE_CLOUD_PROJECT."
        )
    logger.debug("Using project %s from application default credentials", adc_project)
    return adc_project


async def resolve_project_async(explicit: Optional[str], settings: Settings) -> str:
    """resolve_project() for the event loop: the ADC lookup runs on a worker thread."""
    if explicit or settings.default_project:
        return resolve_project(explicit, settings)
    return await asyncio.to_thread(resolve_project, explicit, settings)
