"""Models for tool listings and tool results."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class TextContent(BaseModel):
    """A block of text returned by a tool.

    :param type: Always "text"
    :param text: The text
    """

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Uniform result of a tool call.

    :param content: Text blocks making up the result
    :param is_error: Whether the text describes a failure
    """

    content: list[TextContent]
    is_error: bool = False

    @classmethod
    def from_text(cls, text: str, *, is_error: bool = False) -> ToolResult:
        """Create a single-block result.

        :param text: The text of the result
        :param is_error: Whether the text describes a failure
        :return: ToolResult instance
        """
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @classmethod
    def from_error(cls, message: str) -> ToolResult:
        """Create an error-flagged result.

        :param message: Description of the failure
        :return: ToolResult instance
        """
        return cls.from_text(f"Error: {message}", is_error=True)


class ToolDefinition(BaseModel):
    """Name, description, and JSON input schema of a tool."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
    )
