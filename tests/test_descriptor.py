"""
Unit tests for the tool descriptor parser.
"""

import json

import pytest

from sshmcp.descriptor import load_descriptor, parse_header, parse_tags

FULL_HEADER = """\
#!/bin/bash
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
#     "verbose": {"type": "boolean", "default": false}
#   }
# }
# End Schema

ARGS_FILE="$1"
# Tool: not.header - comments after the header are ignored
"""


class TestParseHeader:
    """Header field extraction."""

    def test_all_fields(self):
        fields = parse_header(FULL_HEADER)

        assert fields["name"] == "system.info"
        assert fields["description"] == "Returns basic system information"
        assert fields["author"] == "ssh-mcp Team"
        assert fields["version"] == "0.1.0"
        assert fields["tags"] == ("system", "monitoring", "diagnostics")
        assert fields["args"] == [
            "verbose: Set to true for more detailed information (boolean, default: false)"
        ]
        assert fields["examples"] == ['{"tool": "system.info", "args": {"verbose": true}}']
        assert fields["schema"] == {
            "type": "object",
            "properties": {"verbose": {"type": "boolean", "default": False}},
        }

    def test_missing_fields_are_absent(self):
        fields = parse_header("#!/bin/bash\n# Tool: bare.tool\necho '{}'\n")

        assert fields == {"name": "bare.tool"}

    def test_malformed_schema_becomes_empty(self):
        source = "# Tool: x.y - d\n# Schema:\n# { not json\n# End Schema\n"

        assert parse_header(source)["schema"] == {}

    def test_unterminated_schema_becomes_empty(self):
        source = '# Tool: x.y - d\n# Schema:\n# {"type": "object"}\n'

        assert parse_header(source)["schema"] == {}

    def test_non_object_schema_becomes_empty(self):
        source = "# Tool: x.y - d\n# Schema:\n# [1, 2]\n# End Schema\n"

        assert parse_header(source)["schema"] == {}

    def test_block_ends_at_next_key(self):
        source = "# Args:\n#   a: first\n#   b: second\n# Version: 3.0\n"
        fields = parse_header(source)

        assert fields["args"] == ["a: first", "b: second"]
        assert fields["version"] == "3.0"

    def test_no_header(self):
        assert parse_header("print('hello')\n") == {}


class TestParseTags:
    def test_string(self):
        assert parse_tags(" a, b ,,a, c") == ("a", "b", "c")

    def test_list(self):
        assert parse_tags(["x", " y ", "x"]) == ("x", "y")

    @pytest.mark.parametrize("value", [None, 3, {"a": 1}])
    def test_unusable(self, value):
        assert parse_tags(value) == ()


class TestLoadDescriptor:
    """Descriptors built from files on disk."""

    def test_defaults(self, tmp_path):
        path = tmp_path / "bare.tool.sh"
        path.write_text("#!/bin/bash\necho '{}'\n")

        descriptor = load_descriptor("bare.tool", path)

        assert descriptor.name == "bare.tool"
        assert descriptor.author == "Unknown"
        assert descriptor.version == "1.0.0"
        assert descriptor.tags == ()
        assert descriptor.schema == {}
        assert descriptor.description == "No description available"
        assert descriptor.effective_schema() == {"type": "object", "properties": {}}
        assert descriptor.created is not None

    def test_registry_identifier_wins_over_header_name(self, tmp_path):
        path = tmp_path / "renamed.tool.sh"
        path.write_text(FULL_HEADER)

        assert load_descriptor("renamed.tool", path).name == "renamed.tool"

    def test_manifest_overrides_header(self, tmp_path):
        path = tmp_path / "system.info.sh"
        path.write_text(FULL_HEADER)
        (tmp_path / "system.info.json").write_text(
            json.dumps(
                {
                    "version": "9.9.9",
                    "tags": ["override"],
                    "schema": {"type": "object", "properties": {"x": {"type": "integer"}}},
                    "examples": [{"tool": "system.info", "args": {}}],
                }
            )
        )

        descriptor = load_descriptor("system.info", path)

        assert descriptor.version == "9.9.9"
        assert descriptor.tags == ("override",)
        assert descriptor.schema["properties"] == {"x": {"type": "integer"}}
        assert descriptor.examples == ('{"tool": "system.info", "args": {}}',)
        # Untouched fields still come from the header.
        assert descriptor.author == "ssh-mcp Team"

    def test_broken_manifest_is_ignored(self, tmp_path):
        path = tmp_path / "system.info.sh"
        path.write_text(FULL_HEADER)
        (tmp_path / "system.info.json").write_text("{broken")

        assert load_descriptor("system.info", path).version == "0.1.0"

    def test_unreadable_source_degrades(self, tmp_path):
        descriptor = load_descriptor("gone.tool", tmp_path / "gone.tool.sh")

        assert descriptor.name == "gone.tool"
        assert descriptor.version == "1.0.0"
        assert descriptor.created is None
