# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration for the cloud
# operations console.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer is the operator-facing "brain".  It:
#     1. Receives a request ("put this landing page online in us-central1")
#     2. Works out which project, zone and resources are involved
#     3. Calls MCP tools (tools/mcp_server.py) to inspect or change them
#     4. Explains the outcome, including any errors, to the operator
#
# WHAT THE AGENT IS NOT:
#   - It is NOT the cloud logic (that's in core/)
#   - It is NOT the tool implementations (that's in tools/)
#
# THE LLM'S ROLE:
#   The LLM (via LiteLlm) reads the system prompt and the tool descriptions,
#   then decides which tools to call and in what order.
# =============================================================================
