#!/usr/bin/env python3
# Tool: process.list - List running processes
# Author: ssh-mcp Team
# Version: 0.1.0
# Tags: system, process, monitoring
#
# Args:
#   filter: Only include processes whose command contains this text (string, default: "")
#   limit: Maximum number of processes to return (number, default: 20)
#   sort: Sort order, "memory" or "pid" (string, default: "memory")
#
# Example:
#   {"tool": "process.list", "args": {"filter": "python", "limit": 5}}
#
# Schema:
# {
#   "type": "object",
#   "properties": {
#     "filter": {"type": "string", "description": "Substring to match in the command line", "default": ""},
#     "limit": {"type": "number", "description": "Maximum number of processes to return", "default": 20},
#     "sort": {"type": "string", "enum": ["memory", "pid"], "default": "memory"}
#   }
# }
# End Schema

import json
import os
import sys


def read_args(path):
    with open(path, encoding="utf-8") as f:
        args = json.load(f)
    return args if isinstance(args, dict) else {}


def read_process(pid):
    base = os.path.join("/proc", pid)
    with open(os.path.join(base, "cmdline"), "rb") as f:
        cmdline = f.read().replace(b"\0", b" ").decode("utf-8", errors="replace").strip()
    with open(os.path.join(base, "status")) as f:
        status = dict(line.split(":", 1) for line in f if ":" in line)
    name = status.get("Name", "").strip()
    rss = status.get("VmRSS", "0 kB").split()[0]
    return {
        "pid": int(pid),
        "name": name,
        "command": cmdline or f"[{name}]",
        "state": status.get("State", "").strip(),
        "memory_kb": int(rss) if rss.isdigit() else 0,
    }


def main():
    args = read_args(sys.argv[1])
    needle = str(args.get("filter") or "")
    limit = args.get("limit", 20)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        limit = 20
    sort = args.get("sort", "memory")

    if not os.path.isdir("/proc"):
        print("process.list requires a /proc filesystem", file=sys.stderr)
        return 1

    processes = []
    for pid in os.listdir("/proc"):
        if not pid.isdigit():
            continue
        try:
            proc = read_process(pid)
        except (OSError, ValueError):
            # Exited while we were reading it, or not ours to read.
            continue
        if needle and needle not in proc["command"]:
            continue
        processes.append(proc)

    if sort == "pid":
        processes.sort(key=lambda p: p["pid"])
    else:
        processes.sort(key=lambda p: (-p["memory_kb"], p["pid"]))

    print(
        json.dumps(
            {
                "processes": processes[:limit],
                "count": min(limit, len(processes)),
                "total": len(processes),
            }
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
