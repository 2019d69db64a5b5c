# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP server that exposes Google Cloud
# operations as MCP tools and resources.
#
# ARCHITECTURAL ROLE:
#   tools/ is the "translation layer" between MCP and the core cloud logic.
#   mcp_server.py:
#     1. Declares each tool's wire schema (names, types, bounds, defaults)
#     2. Resolves the effective project for the call
#     3. Awaits one core/ coroutine
#     4. Turns the resulting ToolResult into MCP text or an MCP error
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT call the Google Cloud SDK (that's in core/)
#   - They do NOT format reports (core/ returns finished Markdown)
#   - They do NOT know about Google ADK (the agent is just one MCP client)
#
# TOOL CONTRACT QUALITY:
#   The docstring of each tool is what the LLM reads to decide WHEN to call
#   it.  Destructive tools say so, so the agent asks before using them.
# =============================================================================
