"""Diagram schemas for validation and rendering results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DiagramErrorKind(str, Enum):
    """Defect classes recognised by the validator."""
    SYNTAX = "syntax"
    NODE = "node"
    ARROW = "arrow"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class DiagramError(BaseModel):
    """A single defect found in diagram source."""
    model_config = ConfigDict(frozen=True)

    kind: DiagramErrorKind
    message: str
    line: int | None = None  # 1-based
    suggestion: str | None = None


class FixResult(BaseModel):
    """Outcome of validating and repairing diagram source."""
    fixed: bool = False
    fixed_code: str | None = None
    errors: list[DiagramError] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_fixed_code(self) -> FixResult:
        if self.fixed != (self.fixed_code is not None):
            msg = "fixed_code must be present if and only if fixed is true"
            raise ValueError(msg)
        return self

    @property
    def had_errors(self) -> bool:
        """Whether validation found anything, resolved or not."""
        return self.fixed or bool(self.errors)

    @property
    def has_unresolved(self) -> bool:
        return bool(self.errors)


class RenderOutcome(BaseModel):
    """Result of handing diagram source to a renderer."""
    success: bool
    visual: str | None = None  # SVG markup
    error: str | None = None
    fix_result: FixResult | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> RenderOutcome:
        if self.success and (self.visual is None or self.error is not None):
            raise ValueError("successful outcome needs a visual and no error")
        if not self.success and (self.error is None or self.visual is not None):
            raise ValueError("failed outcome needs an error and no visual")
        return self
