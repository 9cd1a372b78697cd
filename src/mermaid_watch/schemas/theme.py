"""Renderer theme configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DARK_THEME_VARIABLES: dict[str, str] = {
    "primaryColor": "#10a37f",
    "primaryTextColor": "#e5e7eb",
    "primaryBorderColor": "#10a37f",
    "lineColor": "#9ca3af",
    "secondaryColor": "#1f2937",
    "tertiaryColor": "#111827",
    "background": "#1f2937",
    "mainBkg": "#1f2937",
    "secondBkg": "#111827",
    "textColor": "#e5e7eb",
    "textInvertColor": "#1f2937",
    "border1": "#374151",
    "border2": "#4b5563",
    "noteBkgColor": "#111827",
    "noteTextColor": "#e5e7eb",
    "noteBorderColor": "#374151",
    "actorBkg": "#1f2937",
    "actorBorder": "#10a37f",
    "actorTextColor": "#e5e7eb",
    "actorLineColor": "#9ca3af",
    "labelBoxBkgColor": "#111827",
    "labelBoxBorderColor": "#374151",
    "labelTextColor": "#e5e7eb",
    "loopTextColor": "#e5e7eb",
    "activationBorderColor": "#10a37f",
    "activationBkgColor": "#111827",
    "sequenceNumberColor": "#1f2937",
    "sectionBkgColor": "#111827",
    "altSectionBkgColor": "#1f2937",
    "sectionBkgColor2": "#111827",
    "excludeBkgColor": "#7f1d1d",
    "taskBorderColor": "#10a37f",
    "taskBkgColor": "#1f2937",
    "taskTextColor": "#e5e7eb",
    "taskTextLightColor": "#9ca3af",
    "taskTextOutsideColor": "#e5e7eb",
    "taskTextClickableColor": "#10a37f",
    "activeTaskBorderColor": "#10a37f",
    "activeTaskBkgColor": "#111827",
    "gridColor": "#374151",
    "doneTaskBkgColor": "#065f46",
    "doneTaskBorderColor": "#10a37f",
    "critBorderColor": "#ef4444",
    "critBkgColor": "#7f1d1d",
    "todayLineColor": "#f59e0b",
    "labelColor": "#e5e7eb",
    "errorBkgColor": "#7f1d1d",
    "errorTextColor": "#fca5a5",
}


class ThemeConfig(BaseModel):
    """Configuration handed to a renderer once, at initialization."""
    dark: bool = False
    theme: str = "default"  # default, dark
    security_level: str = "loose"
    font_family: str = "inherit"
    theme_variables: dict[str, str] = Field(default_factory=dict)
    flowchart: dict[str, Any] = Field(
        default_factory=lambda: {"useMaxWidth": True, "htmlLabels": True, "curve": "basis"}
    )
    sequence: dict[str, Any] = Field(
        default_factory=lambda: {
            "diagramMarginX": 50,
            "diagramMarginY": 10,
            "actorMargin": 50,
            "width": 150,
            "height": 65,
            "boxMargin": 10,
            "boxTextMargin": 5,
            "noteMargin": 10,
            "messageMargin": 35,
            "mirrorActors": True,
            "bottomMarginAdj": 1,
            "useMaxWidth": True,
            "rightAngles": False,
            "showSequenceNumbers": False,
        }
    )
    gantt: dict[str, Any] = Field(default_factory=lambda: {"useMaxWidth": True, "leftPadding": 75})

    @classmethod
    def for_mode(cls, dark: bool) -> ThemeConfig:
        """Build the light or dark configuration."""
        if dark:
            return cls(dark=True, theme="dark", theme_variables=dict(DARK_THEME_VARIABLES))
        return cls()

    def to_mermaid_config(self) -> dict[str, Any]:
        """Serialize to the shape Mermaid's initialize() expects."""
        config: dict[str, Any] = {
            "startOnLoad": False,
            "theme": self.theme,
            "securityLevel": self.security_level,
            "fontFamily": self.font_family,
            "flowchart": self.flowchart,
            "sequence": self.sequence,
            "gantt": self.gantt,
        }
        if self.theme_variables:
            config["themeVariables"] = self.theme_variables
        return config
