"""
tools/base.py — Calling convention shared by the analysis tools.

A tool takes keyword inputs (a file path, an optional decode window),
checks them against its declared ToolParameter list, runs the loudness /
key pipeline and reports a ToolResult. Bad inputs and pipeline failures
both come back as ToolResult(success=False) so scripts never see a raw
traceback from a single unreadable file.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolParameter:
    """One keyword input of a tool, e.g. `file_path: str` or `duration: float`."""

    name: str
    type: type
    description: str
    required: bool = True
    default: Any = None

    def validate(self, value: Any) -> tuple[bool, str | None]:
        """Return (ok, error). None passes only when the input is optional."""
        if value is None:
            if self.required:
                return False, f"Required parameter '{self.name}' is missing"
            return True, None

        # a duration of 30 is as good as 30.0; True is not a duration
        if isinstance(value, bool):
            ok = self.type is bool
        elif self.type is float:
            ok = isinstance(value, (int, float))
        else:
            ok = isinstance(value, self.type)

        if not ok:
            return (
                False,
                f"Parameter '{self.name}' must be {self.type.__name__}, got {type(value).__name__}",
            )
        return True, None

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.__name__,
            "description": self.description,
            "required": self.required,
            "default": self.default,
        }


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call.

    `data` carries the measurement payload (loudness and tonal blocks for
    analyze_audio); `metadata` carries the source path and timing.
    """

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] | None = None


class AudioTool(ABC):
    """Base for tools that measure an audio file.

    Subclasses declare name, description and parameters, and implement
    execute(). Callers invoke the tool directly: `tool(file_path=...)`.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def parameters(self) -> list[ToolParameter]: ...

    @abstractmethod
    def execute(self, **kwargs) -> ToolResult:
        """Run the measurement. Inputs have already passed validate_inputs()."""

    def validate_inputs(self, **kwargs) -> tuple[bool, str | None]:
        """First failing parameter wins; unknown keywords are ignored."""
        for param in self.parameters:
            is_valid, error = param.validate(kwargs.get(param.name))
            if not is_valid:
                return False, error
        return True, None

    def __call__(self, **kwargs) -> ToolResult:
        is_valid, error = self.validate_inputs(**kwargs)
        if not is_valid:
            return ToolResult(success=False, error=error)

        try:
            return self.execute(**kwargs)
        except Exception as e:
            logger.exception("Tool %s failed", self.name)
            return ToolResult(success=False, error=f"Tool execution failed: {e}")

    def to_dict(self) -> dict[str, Any]:
        """Name, description and parameter specs, JSON-serialisable."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.as_dict() for p in self.parameters],
        }
