#!/usr/bin/env python3
# Tool: system.health - Check system health status
# Author: ssh-mcp Team
# Version: 0.1.0
# Tags: system, monitoring, health, diagnostics
#
# Args:
#   check: Specific check to perform (string, default: "all", options: "all", "memory", "disk", "load")
#   threshold: Warning threshold percentage (number, default: 80)
#
# Example:
#   {"tool": "system.health", "args": {"check": "disk", "threshold": 90}}
#
# Schema:
# {
#   "type": "object",
#   "properties": {
#     "check": {
#       "type": "string",
#       "description": "Specific health check to perform",
#       "enum": ["all", "memory", "disk", "load"],
#       "default": "all"
#     },
#     "threshold": {
#       "type": "number",
#       "description": "Warning threshold percentage",
#       "default": 80
#     }
#   }
# }
# End Schema

import json
import os
import shutil
import sys

CHECKS = ("memory", "disk", "load")


def read_args(path):
    with open(path, encoding="utf-8") as f:
        args = json.load(f)
    return args if isinstance(args, dict) else {}


def check_memory():
    info = {}
    with open("/proc/meminfo") as f:
        for line in f:
            key, value = line.split(":", 1)
            info[key] = int(value.split()[0])
    total = info["MemTotal"]
    available = info.get("MemAvailable", info.get("MemFree", 0))
    return round((total - available) * 100 / total, 1)


def check_disk():
    usage = shutil.disk_usage("/")
    return round(usage.used * 100 / usage.total, 1) if usage.total else 0.0


def check_load():
    # 1-minute load relative to the number of cores.
    return round(os.getloadavg()[0] * 100 / (os.cpu_count() or 1), 1)


PROBES = {"memory": check_memory, "disk": check_disk, "load": check_load}


def main():
    args = read_args(sys.argv[1])
    check = args.get("check", "all")
    threshold = args.get("threshold", 80)

    if check != "all" and check not in CHECKS:
        print(f"Unknown check: {check}. Use one of: all, {', '.join(CHECKS)}", file=sys.stderr)
        return 2
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        threshold = 80

    selected = CHECKS if check == "all" else (check,)
    status = "healthy"
    issues = []
    details = {}

    for name in selected:
        try:
            percent = PROBES[name]()
        except (OSError, ValueError, KeyError, ZeroDivisionError):
            details[name] = {"usage_percent": None, "status": "unknown"}
            continue
        item_status = "healthy"
        if percent > threshold:
            item_status = "warning"
            status = "warning"
            issues.append(f"{name.capitalize()} usage is high: {percent}%")
        details[name] = {"usage_percent": percent, "status": item_status}

    print(
        json.dumps(
            {
                "status": status,
                "threshold": threshold,
                "issues": issues,
                "details": details,
                "explanation": (
                    f"System health is {status} with {len(issues)} issue(s) "
                    f"above the {threshold}% threshold."
                ),
            }
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
