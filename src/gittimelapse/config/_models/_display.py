"""Display configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gittimelapse.patch import DEFAULT_CONTEXT_LINES, DEFAULT_PLACEHOLDER
from gittimelapse.timeline import DisplayMode


class DisplayConfig(BaseModel):
    """Display configuration section.

    Attributes:
        mode: Initial side-by-side display mode.
        context_lines: Unchanged lines around each change in generated diffs.
        placeholder: Text of alignment placeholder rows.
        verify_aligned: Check hunk content against the buffer in aligned mode.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    mode: DisplayMode = DisplayMode.ALIGNED
    context_lines: int = Field(default=DEFAULT_CONTEXT_LINES, ge=0)
    placeholder: str = DEFAULT_PLACEHOLDER
    verify_aligned: bool = False

    @field_validator("placeholder")
    @classmethod
    def _single_line(cls, value: str) -> str:
        if not value or "\n" in value:
            msg = "placeholder must be a non-empty single line"
            raise ValueError(msg)
        return value
