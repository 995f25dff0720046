#!/usr/bin/env python3
"""Run tasks from a tasks directory and print the outcome as JSON.

Series mode (default) prints the run report payload. With --pipe, the given
JSON value is threaded through every handler and the final value is printed.

Exit code behavior:
- 0 on success
- 1 when a task fails (unknown task, timeout, handler error, invalid pipe value)
- 2 for CLI usage errors

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional


class SafeJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles non-serializable types gracefully."""

    def default(self, obj):
        if hasattr(obj, "isoformat"):
            return obj.isoformat()
        if hasattr(obj, "__fspath__"):
            return str(obj)
        if isinstance(obj, set):
            return sorted(obj, key=str)
        if hasattr(obj, "to_dict") and callable(obj.to_dict):
            return obj.to_dict()
        try:
            return str(obj)
        except Exception:
            return f"<non-serializable: {type(obj).__name__}>"


def _json_arg(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e.msg}")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run tasks registered by a tasks directory")
    parser.add_argument("tasks_dir", help="Directory of task modules defining register(registry, logger)")
    parser.add_argument(
        "tasks",
        nargs="*",
        help="Task names to run in order (default: the allowed tasks defined by the modules)",
    )
    parser.add_argument(
        "--pipe",
        type=_json_arg,
        default=None,
        metavar="JSON",
        help="Pipe mode: JSON initial value threaded through every handler",
    )
    parser.add_argument("--context", type=_json_arg, default=None, metavar="JSON", help="JSON context for handlers")
    parser.add_argument("--args", dest="task_args", type=_json_arg, default=None, metavar="JSON", help="JSON args (series mode)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-handler timeout in seconds (0 = none)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

    from taskchain import TaskError, TaskRunner, TaskRunnerConfig

    runner = TaskRunner(
        TaskRunnerConfig(tasks_dir=Path(args.tasks_dir), debug=bool(args.debug))
    )
    tasks = args.tasks or None

    try:
        if args.pipe is not None:
            result: Any = await runner.pipe(
                tasks,
                initial_value=args.pipe,
                context=args.context,
                timeout=args.timeout,
            )
        else:
            report = await runner.run(tasks, args.context, args.task_args, args.timeout)
            result = report.to_payload()
    except TaskError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, sort_keys=True, cls=SafeJSONEncoder))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
