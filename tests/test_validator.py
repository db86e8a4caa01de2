"""
Unit tests for request validation.
"""

import types

import pytest

from sshmcp.base import InvalidJSONError, InvalidRequestError, MissingDependencyError
from sshmcp.validator import RequestValidator


@pytest.fixture
def validator() -> RequestValidator:
    return RequestValidator()


class TestParse:
    def test_defaults(self, validator):
        request = validator.parse(b'{"tool": "system.info"}')

        assert request.tool == "system.info"
        assert request.args == {}
        assert request.conversation_id == "none"
        assert request.context is None

    def test_all_fields(self, validator):
        request = validator.parse(
            '{"tool": "file.list", "args": {"path": "/tmp"}, "conversation_id": "c-1",'
            ' "context": {"user_intent": "look around", "reasoning": "because"}}'
        )

        assert request.args == {"path": "/tmp"}
        assert request.conversation_id == "c-1"
        assert request.context["user_intent"] == "look around"

    def test_null_args_default_to_empty(self, validator):
        assert validator.parse('{"tool": "a.b", "args": null}').args == {}

    def test_numeric_conversation_id_is_stringified(self, validator):
        assert validator.parse('{"tool": "a.b", "conversation_id": 42}').conversation_id == "42"

    @pytest.mark.parametrize("payload", [b"not json", b"", b"   ", b"{", b"\xff\xfe"])
    def test_invalid_json(self, validator, payload):
        with pytest.raises(InvalidJSONError) as exc_info:
            validator.parse(payload)

        assert exc_info.value.code == "INVALID_JSON"
        assert exc_info.value.status == 400

    @pytest.mark.parametrize(
        "payload",
        [
            "[]",
            '"system.info"',
            "{}",
            '{"tool": ""}',
            '{"tool": "   "}',
            '{"tool": 5}',
            '{"tool": "a.b", "args": [1, 2]}',
            '{"tool": "a.b", "args": "x"}',
            '{"tool": "a.b", "conversation_id": {"x": 1}}',
            '{"tool": "a.b", "context": "free text"}',
        ],
    )
    def test_invalid_request(self, validator, payload):
        with pytest.raises(InvalidRequestError):
            validator.parse(payload)


    def test_invalid_request_carries_conversation_id(self, validator):
        with pytest.raises(InvalidRequestError) as exc_info:
            validator.parse('{"tool": "   ", "conversation_id": 12}')

        assert exc_info.value.conversation_id == "12"


class TestDependencies:
    def test_missing_codec(self):
        with pytest.raises(MissingDependencyError) as exc_info:
            RequestValidator(codec=None).parse('{"tool": "a.b"}')

        assert exc_info.value.status == 500
        assert exc_info.value.code == "MISSING_DEPENDENCY"

    def test_codec_without_loads(self):
        broken = types.ModuleType("broken_json")

        with pytest.raises(MissingDependencyError):
            RequestValidator(codec=broken).check_dependencies()

    def test_dependency_checked_before_payload(self):
        validator = RequestValidator(required_commands=["definitely-not-installed-cmd"])

        with pytest.raises(MissingDependencyError) as exc_info:
            validator.parse(b"not json")

        assert exc_info.value.details == {"missing": ["definitely-not-installed-cmd"]}
