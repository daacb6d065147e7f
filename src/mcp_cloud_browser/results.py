"""The uniform result envelope returned by every tool call."""

from dataclasses import dataclass, field
from typing import List, Union

from mcp import types

Content = Union[types.TextContent, types.ImageContent]


@dataclass
class ToolResult:
    content: List[Content] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def ok(cls, text: str, *extra: Content) -> "ToolResult":
        return cls(content=[types.TextContent(type="text", text=text), *extra], is_error=False)

    @classmethod
    def fail(cls, text: str) -> "ToolResult":
        return cls(content=[types.TextContent(type="text", text=text)], is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all text items."""
        return "\n".join(c.text for c in self.content if isinstance(c, types.TextContent))

    def to_mcp(self) -> types.CallToolResult:
        return types.CallToolResult(content=list(self.content), isError=self.is_error)


def image_content(data: str, mime_type: str = "image/png") -> types.ImageContent:
    return types.ImageContent(type="image", data=data, mimeType=mime_type)


__all__ = ["ToolResult", "image_content"]
