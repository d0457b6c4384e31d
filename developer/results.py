"""Result types returned by tool calls."""

from dataclasses import dataclass, field
from typing import Optional

ASSISTANT = "assistant"
USER = "user"


@dataclass
class Content:
    """A single text content block."""

    text: str
    audience: Optional[list[str]] = None
    priority: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data: dict = {"type": "text", "text": self.text}
        annotations = {}
        if self.audience is not None:
            annotations["audience"] = list(self.audience)
        if self.priority is not None:
            annotations["priority"] = self.priority
        if annotations:
            data["annotations"] = annotations
        return data


@dataclass
class ToolResult:
    """Result of a tool call."""

    content: list[Content] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def success(cls, *content: Content) -> "ToolResult":
        """Create a successful result."""
        return cls(content=list(content), is_error=False)

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        """Create an error result with a single text block."""
        return cls(content=[Content(message)], is_error=True)

    @property
    def text(self) -> str:
        """Text of the first block (empty if there is none)."""
        return self.content[0].text if self.content else ""

    def for_audience(self, audience: str) -> list[Content]:
        """Blocks addressed to ``audience`` (blocks without audience go to everyone)."""
        return [c for c in self.content if c.audience is None or audience in c.audience]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "content": [c.to_dict() for c in self.content],
            "isError": self.is_error,
        }
