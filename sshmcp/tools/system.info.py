#!/usr/bin/env python3
# Tool: system.info - Returns basic system information
# Author: ssh-mcp Team
# Version: 0.1.0
# Tags: system, monitoring, diagnostics
#
# Args:
#   verbose: Set to true for more detailed information (boolean, default: false)
#
# Example:
#   {"tool": "system.info", "args": {"verbose": true}}
#
# Schema:
# {
#   "type": "object",
#   "properties": {
#     "verbose": {
#       "type": "boolean",
#       "description": "Whether to include detailed system information",
#       "default": false
#     }
#   }
# }
# End Schema

import json
import os
import platform
import shutil
import socket
import sys


def read_args(path):
    with open(path, encoding="utf-8") as f:
        args = json.load(f)
    return args if isinstance(args, dict) else {}


def uptime():
    try:
        with open("/proc/uptime") as f:
            seconds = int(float(f.read().split()[0]))
    except (OSError, ValueError, IndexError):
        return "Unknown"
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    return f"{days} days, {hours}:{minutes:02d}" if days else f"{hours}:{minutes:02d}"


def cpu_model():
    try:
        with open("/proc/cpuinfo") as f:
            for line in f:
                if line.startswith("model name"):
                    return line.split(":", 1)[1].strip()
    except OSError:
        pass
    return platform.processor() or "Unknown"


def memory():
    info = {}
    try:
        with open("/proc/meminfo") as f:
            for line in f:
                key, value = line.split(":", 1)
                info[key] = int(value.split()[0]) * 1024
    except (OSError, ValueError):
        return {"total": "Unknown", "used": "Unknown"}
    total = info.get("MemTotal", 0)
    used = total - info.get("MemAvailable", info.get("MemFree", 0))
    return {"total": human(total), "used": human(used)}


def human(size):
    for unit in ("B", "K", "M", "G", "T"):
        if size < 1024 or unit == "T":
            return f"{size:.1f}{unit}"
        size /= 1024


def ip_address():
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        return "Unknown"


def main():
    args = read_args(sys.argv[1])
    uname = platform.uname()
    hostname = socket.gethostname() or uname.node or "localhost"
    cpu_count = os.cpu_count() or 1
    mem = memory()

    result = {
        "hostname": hostname,
        "os": uname.system,
        "kernel": uname.release,
        "uptime": uptime(),
        "cpu": {"model": cpu_model(), "count": cpu_count},
        "memory": mem,
    }

    if args.get("verbose") is True:
        disk = shutil.disk_usage("/")
        result["load_average"] = (
            " ".join(f"{v:.2f}" for v in os.getloadavg()) if hasattr(os, "getloadavg") else "Unknown"
        )
        result["ip_address"] = ip_address()
        result["disk"] = [
            {
                "device": "/",
                "total": human(disk.total),
                "used": human(disk.used),
                "usage": f"{disk.used * 100 // disk.total if disk.total else 0}%",
            }
        ]

    result["explanation"] = (
        f"This system ({hostname}) is running {uname.system} kernel {uname.release} "
        f"with {cpu_count} CPU cores and {mem['total']} of memory."
    )
    result["suggestions"] = [
        {"tool": "system.health", "description": "Check system health status"},
        {"tool": "process.list", "description": "List running processes"},
        {"tool": "file.list", "description": "List files in a directory"},
    ]

    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
