# pyright: reportAny=false, reportExplicitAny=false, reportUnknownArgumentType=false
"""Configuration validation using Pydantic schemas.

The section models already ignore unknown keys, so ``ConfigSchema`` accepts
configuration files written for newer versions of the tool.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from gittimelapse.config._models._display import DisplayConfig
from gittimelapse.config._models._history import HistoryConfig
from gittimelapse.config._models._logging import LoggingConfig
from gittimelapse.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Represents a configuration validation issue.

    Attributes:
        key: Dotted path to the configuration key (e.g., "display.mode").
        message: Human-readable description of the issue.
        expected: Description of expected value or type, if available.
        actual: The actual value that caused the issue.
    """

    key: str
    message: str
    expected: str | None
    actual: Any


class ConfigSchema(BaseModel):
    """Pydantic schema for the root configuration table."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = LoggingConfig()
    history: HistoryConfig = HistoryConfig()
    display: DisplayConfig = DisplayConfig()


def _pydantic_error_to_issue(error: "ErrorDetails") -> ValidationIssue:  # noqa: UP037
    loc = error.get("loc", ())
    ctx = error.get("ctx")
    expected: str | None = None
    if ctx is not None:
        if "expected" in ctx:
            expected = str(ctx["expected"])
        elif "ge" in ctx or "le" in ctx:
            bounds = ", ".join(f"{k} {v}" for k, v in ctx.items() if k in {"ge", "le"})
            expected = bounds
    return ValidationIssue(
        key=".".join(str(part) for part in loc),
        message=str(error.get("msg", "Validation error")),
        expected=expected,
        actual=error.get("input"),
    )


def parse_config(data: dict[str, Any]) -> tuple[ConfigSchema, list[ValidationIssue]]:
    """Validate a merged configuration dictionary.

    Returns:
        The parsed schema (defaults when invalid) and the issues found.
    """
    try:
        return ConfigSchema.model_validate(data), []
    except ValidationError as e:
        return ConfigSchema(), [_pydantic_error_to_issue(err) for err in e.errors()]


def raise_if_validation_errors(
    issues: list[ValidationIssue],
    source: str | None = None,
) -> None:
    """Raise ConfigValidationError for the first issue, if any.

    Raises:
        ConfigValidationError: If ``issues`` is not empty.
    """
    if issues:
        issue = issues[0]
        msg = f"Invalid configuration value for '{issue.key}': {issue.message}"
        raise ConfigValidationError(
            msg,
            key=issue.key,
            value=issue.actual,
            expected=issue.expected or issue.message,
            source=source,
        )
