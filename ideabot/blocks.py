"""Structured Slack response types.

Only the Block Kit shapes the bot actually emits are modelled here.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Union


@dataclass
class HeaderBlock:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "header", "text": {"type": "plain_text", "text": self.text, "emoji": True}}


@dataclass
class SectionBlock:
    """Section with markdown text, a list of markdown fields, or both."""

    text: str | None = None
    fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        block: dict[str, Any] = {"type": "section"}
        if self.text is not None:
            block["text"] = {"type": "mrkdwn", "text": self.text}
        if self.fields:
            block["fields"] = [{"type": "mrkdwn", "text": f} for f in self.fields]
        return block


@dataclass
class DividerBlock:
    def to_dict(self) -> dict[str, Any]:
        return {"type": "divider"}


@dataclass
class ContextBlock:
    elements: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": e} for e in self.elements],
        }


Block = Union[HeaderBlock, SectionBlock, DividerBlock, ContextBlock]


@dataclass
class SlackResponse:
    """A reply to a slash command, sent through its ``response_url``."""

    text: str
    blocks: list[Block] = field(default_factory=list)
    response_type: Literal["ephemeral", "in_channel"] = "ephemeral"
    replace_original: bool = False

    @classmethod
    def ephemeral(cls, text: str, **kwargs: Any) -> "SlackResponse":
        return cls(text=text, response_type="ephemeral", **kwargs)

    @classmethod
    def in_channel(cls, text: str, **kwargs: Any) -> "SlackResponse":
        return cls(text=text, response_type="in_channel", **kwargs)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"response_type": self.response_type, "text": self.text}
        if self.blocks:
            payload["blocks"] = [block.to_dict() for block in self.blocks]
        if self.replace_original:
            payload["replace_original"] = True
        return payload
