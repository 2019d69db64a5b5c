# =============================================================================
# agent/cloud_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the Google ADK agent that drives the GCP MCP server.  ADK is the
#   agent framework (orchestration, tool calling, sessions); the LLM behind it
#   is chosen through LiteLlm (CLOUD_AGENT_MODEL, default GPT-4o via
#   OpenRouter).
#
#   ┌──────────────────────────────┐        ┌──────────────────────────┐
#   │  Google ADK Agent            │ stdio  │  FastMCP server          │
#   │  prompt + LiteLlm + MCP tools│───────▶│  tools/mcp_server.py     │
#   └──────────────────────────────┘        └────────────┬─────────────┘
#                                                        ▼
#                                           ┌──────────────────────────┐
#                                           │  core/  → Google Cloud   │
#                                           └──────────────────────────┘
#
# MCP CONNECTION:
#   ADK starts the MCP server as a subprocess with "uv run python ...", so the
#   subprocess uses the project's virtual environment (fastmcp, google-cloud-*
#   and the core/ package are all importable there).  Tool calls go over the
#   subprocess's stdin/stdout.
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_cloud_ops_prompt
from core.config import Settings


def mcp_server_path() -> str:
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(project_root, "tools", "mcp_server.py")


def create_agent(settings: Settings) -> Agent:
    """Create the cloud operations agent wired to the GCP MCP server.

    The server subprocess inherits the environment, so the default project
    the agent is told about is the same one the tools will fall back to.
    """
    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", mcp_server_path()],
        ),
    )

    return Agent(
        name="gcp_cloud_ops",
        model=LiteLlm(model=settings.agent_model),
        instruction=get_cloud_ops_prompt(settings.default_project),
        tools=[mcp_tools],
    )
