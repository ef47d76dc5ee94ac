#!/usr/bin/env python3
"""teamAgent - command line entry point.

Usage:
    python team_main.py "Research the market for home batteries and write a summary"
    python team_main.py --agents my_agents.yaml "Review this design with a security and a UX reviewer"

The prompt is decomposed into a task plan, a team is recruited from the agent
roster, the tasks are executed by the team and the deliverable is printed.
Ctrl+C cancels cooperatively: running agents stop before their next turn.
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path

# Add project root to sys.path for imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from teamAgent.agents import load_agent_roster
from teamAgent.config.settings import get_settings
from teamAgent.models import ModelResolver
from teamAgent.orchestration import OrchestrationProgress, OrchestrationResult, TeamOrchestrator
from teamAgent.tools import ToolRegistry, default_tools
from teamAgent.utils.error_handler import TeamAgentError
from teamAgent.utils.logging_utils import setup_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a request through an agent team.")
    parser.add_argument("prompt", nargs="*", help="Request text (read from stdin when omitted)")
    parser.add_argument("--agents", type=Path, default=None, help="Agent roster YAML (default: bundled roster)")
    parser.add_argument("--lead", default=None, help="Roster id of the team lead")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")
    return parser.parse_args(argv)


def print_progress(update: OrchestrationProgress) -> None:
    counter = f" ({update.completed}/{update.total})" if update.total else ""
    print(f"[{update.progress:3d}%] {update.phase}{counter}: {update.message}")


def print_result(result: OrchestrationResult) -> None:
    print()
    print("=" * 60)
    print(f"Team: {result.team_name}")
    print(f"Strategy: {result.decomposition.strategy.value}  Turns: {result.total_turns}")
    for execution in result.executions:
        mark = "ok" if execution.success else "failed"
        print(f"  - {execution.title} [{execution.agent_name}] {mark}")
    print("=" * 60)
    print()
    print(result.response or "(no output)")

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    for error in result.errors:
        print(f"error: {error}", file=sys.stderr)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    setup_logging(args.log_dir or settings.observability.log_dir, settings.observability.log_level)

    prompt = " ".join(args.prompt).strip() or sys.stdin.read().strip()
    if not prompt:
        print("Nothing to do: empty prompt.", file=sys.stderr)
        return 2

    orchestrator = TeamOrchestrator(
        load_agent_roster(args.agents),
        ModelResolver(settings),
        tool_registry=ToolRegistry(default_tools()),
        settings=settings,
        lead_id=args.lead,
    )

    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.set)
    except NotImplementedError:  # Windows event loops
        pass

    result = await orchestrator.orchestrate(prompt, cancellation_signal=cancel, on_progress=print_progress)
    print_result(result)
    if result.cancelled:
        return 130
    return 0 if result.success else 1


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except TeamAgentError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
