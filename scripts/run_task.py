#!/usr/bin/env python3
"""
Run one AgentOS task from the command line.

    python scripts/run_task.py agentA "What changed in the latest release?"
    python scripts/run_task.py agentA "..." --telemetry
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from agentos import create_agent_os  # noqa: E402
from agentos.config import configure_logging  # noqa: E402
from agentos.errors import TaskFailed  # noqa: E402


async def _run(args) -> int:
    agent_os = create_agent_os()
    try:
        response = await agent_os.run_task(args.session, args.query)
    except TaskFailed as e:
        print(f"Task failed: {e}", file=sys.stderr)
        return 1
    print(response)
    if args.telemetry:
        print(json.dumps(agent_os.get_telemetry(), indent=2, default=str))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Run one AgentOS task")
    parser.add_argument("session", help="Session / agent id owning the task")
    parser.add_argument("query", help="Instruction for the reasoning kernel")
    parser.add_argument("--telemetry", action="store_true", help="Print kernel and memory telemetry")
    parser.add_argument("--log-level", default=None, help="Override the profile's log level")
    args = parser.parse_args()

    configure_logging(args.log_level)
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
