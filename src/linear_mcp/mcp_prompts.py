"""MCP prompts that draft Linear bug reports and feature requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.types import PromptMessage, TextContent

from linear_mcp.types.capabilities import PromptArgs, PromptArgumentSpec, PromptDescriptor

if TYPE_CHECKING:
    from linear_mcp.registry import CapabilityRegistry

_BUG_REPORT_TEXT = (
    "I want to create a bug report in Linear with the following information:\n  \n"
    "Title: {title}\n\n"
    "Description:\n{description}\n\n"
    "Please help me create this bug report in Linear and assign it to the appropriate team."
)

_FEATURE_REQUEST_TEXT = (
    "I want to create a feature request in Linear with the following information:\n  \n"
    "Title: {title}\n\n"
    "Description:\n{description}\n\n"
    "Please help me create this feature request in Linear, assign it to the appropriate team, "
    "and add relevant labels."
)


def register(registry: CapabilityRegistry) -> None:
    registry.register_prompt(
        PromptDescriptor(
            name="linear_bug_report",
            description="Creates a bug report in Linear",
            arguments=(
                PromptArgumentSpec(name="title", description="Title of the bug report"),
                PromptArgumentSpec(name="description", description="Detailed description of the bug"),
            ),
        ),
        bug_report,
    )
    registry.register_prompt(
        PromptDescriptor(
            name="linear_feature_request",
            description="Creates a feature request in Linear",
            arguments=(
                PromptArgumentSpec(name="title", description="Title of the feature request"),
                PromptArgumentSpec(name="description", description="Detailed description of the requested feature"),
            ),
        ),
        feature_request,
    )


def _user_message(text: str) -> list[PromptMessage]:
    return [PromptMessage(role="user", content=TextContent(type="text", text=text))]


def bug_report(args: PromptArgs) -> list[PromptMessage]:
    title = args.get("title") or "Bug Report"
    description = args.get("description") or "Please describe the bug in detail"
    return _user_message(_BUG_REPORT_TEXT.format(title=title, description=description))


def feature_request(args: PromptArgs) -> list[PromptMessage]:
    title = args.get("title") or "Feature Request"
    description = args.get("description") or "Please describe the feature you would like to see"
    return _user_message(_FEATURE_REQUEST_TEXT.format(title=title, description=description))
