"""Configuration: YAML parser, Pydantic models, and the formatting context."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from citekit.core.models import Style

EXPORT_FORMATS = ("txt", "docx", "csv", "xlsx")


# ── Context ──────────────────────────────────────────────────────────


class CitationContext(BaseModel):
    """Explicit state passed into formatting entry points."""

    style: Style = Style.MLA

    @field_validator("style", mode="before")
    @classmethod
    def parse_style(cls, v):
        return Style.parse(v)


# ── Config Sections ──────────────────────────────────────────────────


class EmphasisMarkers(BaseModel):
    """Markers wrapped around emphasized runs in plain-text output."""

    open: str = ""
    close: str = ""


class StoreConfig(BaseModel):
    path: Path = Path("data/citations.db")


class ExportConfig(BaseModel):
    dir: Path = Path("exports")
    formats: list[str] = Field(default_factory=lambda: list(EXPORT_FORMATS))

    @field_validator("formats")
    @classmethod
    def known_formats(cls, v: list[str]) -> list[str]:
        unknown = [f for f in v if f not in EXPORT_FORMATS]
        if unknown:
            raise ValueError(
                f"Unknown export formats: {unknown} (valid: {', '.join(EXPORT_FORMATS)})"
            )
        return v


# ── Top-level ────────────────────────────────────────────────────────


class CiteConfig(BaseModel):
    """Top-level settings for the command-line tools."""

    style: Style = Style.MLA
    emphasis: EmphasisMarkers = Field(default_factory=EmphasisMarkers)
    store: StoreConfig = Field(default_factory=StoreConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @field_validator("style", mode="before")
    @classmethod
    def parse_style(cls, v):
        return Style.parse(v)

    def context(self) -> CitationContext:
        return CitationContext(style=self.style)


def load_config(path: str | Path) -> CiteConfig:
    """Load a YAML config from disk and return a validated model."""
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return CiteConfig.model_validate(raw)
