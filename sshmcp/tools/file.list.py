#!/usr/bin/env python3
# Tool: file.list - List files in a directory
# Author: ssh-mcp Team
# Version: 0.1.0
# Tags: files, filesystem, directory
#
# Args:
#   path: Directory path to list (string, default: ".")
#   pattern: Optional glob pattern to filter files (string, default: "")
#   show_hidden: Show hidden files (boolean, default: false)
#   recursive: List recursively (boolean, default: false)
#   limit: Maximum number of files to return (number, default: 50)
#
# Example:
#   {"tool": "file.list", "args": {"path": "/etc", "pattern": "*.conf"}}
#
# Schema:
# {
#   "type": "object",
#   "properties": {
#     "path": {"type": "string", "description": "Directory path to list", "default": "."},
#     "pattern": {"type": "string", "description": "Optional pattern to filter files", "default": ""},
#     "show_hidden": {"type": "boolean", "description": "Show hidden files", "default": false},
#     "recursive": {"type": "boolean", "description": "List recursively", "default": false},
#     "limit": {"type": "number", "description": "Maximum number of files to return", "default": 50}
#   }
# }
# End Schema

import fnmatch
import json
import os
import sys
from datetime import datetime, timezone


def read_args(path):
    with open(path, encoding="utf-8") as f:
        args = json.load(f)
    return args if isinstance(args, dict) else {}


def walk(root, recursive):
    if not recursive:
        for entry in sorted(os.scandir(root), key=lambda e: e.name):
            yield entry
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for entry in sorted(os.scandir(dirpath), key=lambda e: e.name):
            yield entry


def describe(entry, root):
    stat = entry.stat(follow_symlinks=False)
    return {
        "name": os.path.relpath(entry.path, root),
        "type": "directory" if entry.is_dir(follow_symlinks=False) else "file",
        "size": stat.st_size,
        "modified": datetime.fromtimestamp(stat.st_mtime, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


def main():
    args = read_args(sys.argv[1])
    root = os.path.expanduser(str(args.get("path") or "."))
    pattern = args.get("pattern") or ""
    show_hidden = args.get("show_hidden") is True
    recursive = args.get("recursive") is True
    limit = args.get("limit", 50)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        limit = 50

    if not os.path.isdir(root):
        print(f"Directory not found: {root}", file=sys.stderr)
        return 2

    files = []
    total = 0
    try:
        for entry in walk(root, recursive):
            if not show_hidden and entry.name.startswith("."):
                continue
            if pattern and not fnmatch.fnmatch(entry.name, pattern):
                continue
            total += 1
            if len(files) < limit:
                files.append(describe(entry, root))
    except PermissionError as e:
        print(f"Permission denied: {e.filename}", file=sys.stderr)
        return 13

    print(
        json.dumps(
            {
                "path": os.path.abspath(root),
                "files": files,
                "count": len(files),
                "total": total,
                "truncated": total > len(files),
            }
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
