# =============================================================================
# main.py  —  Entry Point for the GCP Cloud Ops Console
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env and builds Settings (default project, agent model)
#   2. Creates the Google ADK agent (agent/cloud_agent.py), which starts the
#      MCP server (tools/mcp_server.py) as a subprocess
#   3. Reads operator requests in a loop and streams the agent's work:
#      every tool call is printed as it happens, then the final answer
#
# GOOGLE ADK CONCEPTS USED:
#   - Runner: Manages the agent's execution lifecycle
#   - SessionService: Keeps the conversation across turns (in memory)
#   - Content/Part: ADK's message format
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Must run before Settings/LiteLlm read the environment
# (GOOGLE_CLOUD_PROJECT, OPENROUTER_API_KEY, ...).
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.cloud_agent import create_agent
from core.config import load_settings

APP_NAME = "gcp_cloud_ops"
USER_ID = "operator"


async def run_agent():
    """Run the cloud operations console interactively."""
    settings = load_settings()

    print("=" * 70)
    print("  GCP CLOUD OPS CONSOLE")
    print("  Google ADK + FastMCP + Google Cloud SDK")
    print("=" * 70)
    print(f"\n🔧 Default project: {settings.default_project or '(none — the agent will ask)'}")
    print("🔧 Initializing agent...")
    agent = create_agent(settings)

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    print("💬 Ask for something, e.g. 'list my VMs' or 'draw my project architecture'")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(
            role="user",
            parts=[types.Part(text=user_input)],
        )

        print("\n🤖 Agent is working...\n")
        print("-" * 70)

        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if hasattr(part, "text") and part.text:
                        final_response = part.text

                    if hasattr(part, "function_call") and part.function_call:
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
