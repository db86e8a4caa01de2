"""
Tests for the append-only request/response journal.
"""

import json
import re
import threading

from sshmcp import response as responses
from sshmcp.base import InvalidJSONError, Request
from sshmcp.journal import Journal

LINE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[(?P<cid>[^\]]*)\] (?P<kind>REQUEST|RESPONSE): (?P<body>.*)$")


def read_lines(path):
    return path.read_text(encoding="utf-8").splitlines()


class TestJournal:
    def test_writes_request_response_pair(self, tmp_path):
        path = tmp_path / "logs" / "mcp.log"
        journal = Journal(path)
        envelope = responses.success(Request(tool="a.b", conversation_id="c1"), {"ok": True})

        journal.record("c1", '{"tool": "a.b",\n "conversation_id": "c1"}', envelope)

        lines = read_lines(path)
        assert len(lines) == 2
        first, second = (LINE.match(line) for line in lines)
        assert first["kind"] == "REQUEST" and first["cid"] == "c1"
        assert json.loads(first["body"]) == {"tool": "a.b", "conversation_id": "c1"}
        assert second["kind"] == "RESPONSE"
        assert json.loads(second["body"])["result"] == {"ok": True}

    def test_non_json_request_stays_on_one_line(self, tmp_path):
        path = tmp_path / "mcp.log"
        envelope = responses.from_error(InvalidJSONError("bad"))

        Journal(path).record("none", b"not\njson", envelope)

        lines = read_lines(path)
        assert len(lines) == 2
        assert json.loads(LINE.match(lines[0])["body"]) == "not\njson"

    def test_appends(self, tmp_path):
        path = tmp_path / "mcp.log"
        journal = Journal(path)
        envelope = responses.from_error(InvalidJSONError("bad"))

        journal.record("a", "x", envelope)
        Journal(path).record("b", "y", envelope)

        assert [LINE.match(line)["cid"] for line in read_lines(path)] == ["a", "a", "b", "b"]

    def test_failure_is_swallowed(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        journal = Journal(blocker / "mcp.log")

        journal.record("c", "{}", responses.from_error(InvalidJSONError("bad")))

    def test_disabled(self, tmp_path):
        journal = Journal(None)

        assert not journal.enabled
        journal.record("c", "{}", responses.from_error(InvalidJSONError("bad")))
        assert list(tmp_path.iterdir()) == []

    def test_concurrent_writers_do_not_interleave(self, tmp_path):
        path = tmp_path / "mcp.log"
        journal = Journal(path)
        envelope = responses.success(Request(tool="a.b"), {"blob": "x" * 5000})

        threads = [
            threading.Thread(target=journal.record, args=(f"t{i}", "{}", envelope))
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = read_lines(path)
        assert len(lines) == 16
        matches = [LINE.match(line) for line in lines]
        assert all(matches)
        # Each pair is written together.
        for req, resp in zip(matches[::2], matches[1::2]):
            assert req["cid"] == resp["cid"]
            assert (req["kind"], resp["kind"]) == ("REQUEST", "RESPONSE")
