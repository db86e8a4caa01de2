#!/usr/bin/env python3
# Tool: network.status - Report network interfaces and basic connectivity
# Author: ssh-mcp Team
# Version: 0.1.0
# Tags: network, monitoring, diagnostics
#
# Args:
#   check_host: Optional host to test TCP connectivity against (string, default: "")
#   port: Port used for the connectivity check (number, default: 443)
#
# Example:
#   {"tool": "network.status", "args": {"check_host": "example.com"}}
#
# Schema:
# {
#   "type": "object",
#   "properties": {
#     "check_host": {"type": "string", "description": "Host to test connectivity against"},
#     "port": {"type": "number", "description": "TCP port for the connectivity check", "default": 443}
#   }
# }
# End Schema

import json
import os
import socket
import sys
import time


def read_args(path):
    with open(path, encoding="utf-8") as f:
        args = json.load(f)
    return args if isinstance(args, dict) else {}


def interfaces():
    result = []
    for _, name in socket.if_nameindex():
        state = "unknown"
        try:
            with open(f"/sys/class/net/{name}/operstate") as f:
                state = f.read().strip()
        except OSError:
            pass
        result.append({"name": name, "state": state})
    return result


def probe(host, port):
    start = time.time()
    try:
        with socket.create_connection((host, port), timeout=5):
            pass
    except OSError as e:
        return {"host": host, "port": port, "reachable": False, "error": str(e)}
    return {
        "host": host,
        "port": port,
        "reachable": True,
        "latency_ms": round((time.time() - start) * 1000, 1),
    }


def main():
    args = read_args(sys.argv[1])
    host = args.get("check_host") or ""
    port = args.get("port", 443)
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        print(f"Invalid port: {port}", file=sys.stderr)
        return 2

    result = {
        "hostname": socket.gethostname(),
        "interfaces": interfaces(),
    }
    if host:
        result["connectivity"] = probe(str(host), port)
    if os.path.exists("/etc/resolv.conf"):
        with open("/etc/resolv.conf") as f:
            result["nameservers"] = [
                line.split()[1] for line in f if line.startswith("nameserver") and len(line.split()) > 1
            ]

    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
