"""Tests for CapabilityRegistry.read_resource outcome normalization."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from linear_mcp.registry import CapabilityRegistry
from linear_mcp.types.capabilities import (
    ResourceContent,
    ResourceDescriptor,
    ResourceResponse,
    ResourceTemplateDescriptor,
)


def _static(response: ResourceResponse) -> Any:
    calls: list[dict[str, Any]] = []

    async def handler(args: dict[str, Any]) -> ResourceResponse:
        calls.append(args)
        return response

    handler.calls = calls  # type: ignore[attr-defined]
    return handler


def _raising(exc: Exception) -> Any:
    async def handler(args: dict[str, Any]) -> ResourceResponse:
        raise exc

    return handler


@pytest.fixture
def reg() -> CapabilityRegistry:
    return CapabilityRegistry()


class TestLookup:
    async def test_unknown_uri(self, reg: CapabilityRegistry) -> None:
        result = await reg.read_resource("nothing:///here")
        assert result.is_error
        assert result.error_message == "Resource not found: nothing:///here"
        assert result.content is None

    async def test_exact_key_passes_args_through(self, reg: CapabilityRegistry) -> None:
        handler = _static(ResourceResponse(data=ResourceContent(text="ok")))
        reg.register_resource(ResourceDescriptor(uri="thing:", name="thing"), handler)
        await reg.read_resource("thing:", {"a": 1})
        assert handler.calls == [{"a": 1}]

    async def test_missing_args_become_empty_dict(self, reg: CapabilityRegistry) -> None:
        handler = _static(ResourceResponse(data=ResourceContent(text="ok")))
        reg.register_resource(ResourceDescriptor(uri="thing:", name="thing"), handler)
        await reg.read_resource("thing:")
        assert handler.calls == [{}]

    async def test_template_variables_are_extracted(self, reg: CapabilityRegistry) -> None:
        handler = _static(ResourceResponse(data=ResourceContent(text="ok")))
        reg.register_resource(ResourceTemplateDescriptor(uri_template="thing:///{id}/parts", name="t"), handler)
        await reg.read_resource("thing:///abc%20def/parts")
        assert handler.calls == [{"id": "abc def"}]

    async def test_caller_args_win_over_template_variables(self, reg: CapabilityRegistry) -> None:
        handler = _static(ResourceResponse(data=ResourceContent(text="ok")))
        reg.register_resource(ResourceTemplateDescriptor(uri_template="thing:///{id}", name="t"), handler)
        await reg.read_resource("thing:///from-uri", {"id": "from-caller"})
        assert handler.calls == [{"id": "from-caller"}]

    async def test_variable_matches_single_segment(self, reg: CapabilityRegistry) -> None:
        detail = _static(ResourceResponse(data=ResourceContent(text="detail")))
        issues = _static(ResourceResponse(data=ResourceContent(text="issues")))
        reg.register_resource(ResourceTemplateDescriptor(uri_template="team:///{id}", name="d"), detail)
        reg.register_resource(ResourceTemplateDescriptor(uri_template="team:///{id}/issues", name="i"), issues)

        result = await reg.read_resource("team:///t1/issues")
        assert result.content is not None
        assert result.content.text == "issues"
        assert detail.calls == []

    async def test_exact_key_beats_template(self, reg: CapabilityRegistry) -> None:
        literal = _static(ResourceResponse(data=ResourceContent(text="literal")))
        template = _static(ResourceResponse(data=ResourceContent(text="template")))
        reg.register_resource(ResourceTemplateDescriptor(uri_template="viewer:///{part}", name="t"), template)
        reg.register_resource(ResourceDescriptor(uri="viewer:///teams", name="teams"), literal)
        result = await reg.read_resource("viewer:///teams")
        assert result.content is not None
        assert result.content.text == "literal"

    async def test_repeated_variable_must_match_same_segment(self, reg: CapabilityRegistry) -> None:
        handler = _static(ResourceResponse(data=ResourceContent(text="pair")))
        reg.register_resource(ResourceTemplateDescriptor(uri_template="pair:///{id}/{id}", name="p"), handler)

        assert not (await reg.read_resource("pair:///a/a")).is_error
        assert handler.calls == [{"id": "a"}]
        mismatch = await reg.read_resource("pair:///a/b")
        assert mismatch.error_message == "Resource not found: pair:///a/b"

    async def test_repeated_variable_does_not_break_other_lookups(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(
            ResourceTemplateDescriptor(uri_template="pair:///{id}/{id}", name="p"),
            _static(ResourceResponse(data=ResourceContent(text="pair"))),
        )
        result = await reg.read_resource("other:///anything")
        assert result.is_error
        assert result.error_message == "Resource not found: other:///anything"

    async def test_first_registered_template_wins(self, reg: CapabilityRegistry) -> None:
        first = _static(ResourceResponse(data=ResourceContent(text="first")))
        second = _static(ResourceResponse(data=ResourceContent(text="second")))
        reg.register_resource(ResourceTemplateDescriptor(uri_template="doc:///{name}", name="a"), first)
        reg.register_resource(ResourceTemplateDescriptor(uri_template="doc:///{slug}", name="b"), second)
        result = await reg.read_resource("doc:///readme")
        assert result.content is not None
        assert result.content.text == "first"
        assert second.calls == []


class TestOutcomes:
    async def test_success_stamps_requested_uri(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(
            ResourceTemplateDescriptor(uri_template="thing:///{id}", name="t"),
            _static(ResourceResponse(data=ResourceContent(mime_type="application/json", text="{}"))),
        )
        result = await reg.read_resource("thing:///7")
        assert not result.is_error
        assert result.content is not None
        assert result.content.uri == "thing:///7"
        assert result.content.mime_type == "application/json"

    async def test_handler_uri_is_kept(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(
            ResourceDescriptor(uri="thing:", name="t"),
            _static(ResourceResponse(data=ResourceContent(uri="thing:///canonical", text="x"))),
        )
        result = await reg.read_resource("thing:")
        assert result.content is not None
        assert result.content.uri == "thing:///canonical"

    async def test_blob_only_content_is_valid(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(
            ResourceDescriptor(uri="thing:", name="t"),
            _static(ResourceResponse(data=ResourceContent(blob="aGVsbG8="))),
        )
        result = await reg.read_resource("thing:")
        assert not result.is_error

    async def test_handler_reported_error(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(
            ResourceDescriptor(uri="thing:", name="t"),
            _static(ResourceResponse(is_error=True, error_message="Team with ID t1 not found")),
        )
        result = await reg.read_resource("thing:")
        assert result.is_error
        assert result.error_message == "Team with ID t1 not found"

    async def test_handler_error_without_message(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(ResourceDescriptor(uri="thing:", name="t"), _static(ResourceResponse(is_error=True)))
        result = await reg.read_resource("thing:")
        assert result.error_message == "Error reading resource: thing:"

    @pytest.mark.parametrize(
        "content",
        [None, ResourceContent(), ResourceContent(text="", blob="")],
    )
    async def test_missing_text_and_blob(self, reg: CapabilityRegistry, content: ResourceContent | None) -> None:
        reg.register_resource(ResourceDescriptor(uri="thing:", name="t"), _static(ResourceResponse(data=content)))
        result = await reg.read_resource("thing:")
        assert result.is_error
        assert result.error_message == "Invalid resource content: missing both text and blob for thing:"

    async def test_raised_exception_message(self, reg: CapabilityRegistry, caplog: pytest.LogCaptureFixture) -> None:
        reg.register_resource(ResourceDescriptor(uri="thing:", name="t"), _raising(RuntimeError("boom")))
        with caplog.at_level(logging.WARNING, logger="linear_mcp.registry"):
            result = await reg.read_resource("thing:")
        assert result.is_error
        assert result.error_message == "boom"
        assert any("thing:" in r.getMessage() for r in caplog.records)

    async def test_raised_exception_without_message(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(ResourceDescriptor(uri="thing:", name="t"), _raising(RuntimeError()))
        result = await reg.read_resource("thing:")
        assert result.error_message == "Unknown error reading resource: thing:"

    async def test_handler_invoked_once(self, reg: CapabilityRegistry) -> None:
        handler = _static(ResourceResponse(is_error=True))
        reg.register_resource(ResourceDescriptor(uri="thing:", name="t"), handler)
        await reg.read_resource("thing:")
        assert len(handler.calls) == 1

    async def test_handler_returning_none(self, reg: CapabilityRegistry) -> None:
        async def handler(args: dict[str, Any]) -> Any:
            return None

        reg.register_resource(ResourceDescriptor(uri="thing:", name="t"), handler)
        result = await reg.read_resource("thing:")
        assert result.is_error
        assert result.error_message == "Unknown error reading resource: thing:"
        assert result.content is None

    async def test_data_that_is_not_content(self, reg: CapabilityRegistry) -> None:
        reg.register_resource(
            ResourceDescriptor(uri="thing:", name="t"),
            _static(ResourceResponse(data={"text": "hello"})),  # type: ignore[arg-type]
        )
        result = await reg.read_resource("thing:")
        assert result.is_error
        assert result.error_message == "Invalid resource content: missing both text and blob for thing:"
