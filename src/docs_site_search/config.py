"""Centralized configuration for docs-site-search using Pydantic Settings."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PLACEHOLDER = "Search documentation..."
DEFAULT_HOTKEY = "/"


class SearchConfig(BaseModel):
    """Options controlling the search box and query behavior.

    These only gate behavior; the ranking formula is fixed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Build the index and expose search")
    limit: int = Field(default=10, ge=1, description="Maximum results returned per query")
    prefix: bool = Field(default=True, description="Expand the last query term to indexed terms it prefixes")
    placeholder: str = Field(default=DEFAULT_PLACEHOLDER, description="Placeholder text of the search input")
    hotkey: str = Field(default=DEFAULT_HOTKEY, description="Key that focuses the search input")

    @field_validator("hotkey")
    @classmethod
    def _check_hotkey(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("hotkey must not be empty")
        return value


def resolve_search_config(value: "bool | Mapping[str, Any] | SearchConfig | None") -> SearchConfig:
    """Normalize the user-facing ``search`` option.

    ``None`` and ``True`` mean defaults, ``False`` disables search, and a
    mapping overrides individual fields.
    """
    if isinstance(value, SearchConfig):
        return value
    if value is None or value is True:
        return SearchConfig()
    if value is False:
        return SearchConfig(enabled=False)
    if isinstance(value, Mapping):
        return SearchConfig(**value)
    raise TypeError(f"search option must be a bool or a mapping, got {type(value).__name__}")


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``DOCS_SEARCH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOCS_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Site layout
    site_dir: Path = Field(default=Path("site"), description="Directory of rendered pages or Markdown sources")
    out_dir: Path | None = Field(
        default=None,
        description="Directory search-index.json is written to (defaults to site_dir)",
    )
    base: str = Field(default="/", description="URL path the site is served under")

    # Dev server
    host: str = Field(default="127.0.0.1", description="Dev server bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Dev server port")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Root log level"
    )
    log_json: bool = Field(default=False, description="Emit structured JSON logs")

    # Search options
    search_enabled: bool = Field(default=True, description="Enable full-text search")
    search_limit: int = Field(default=10, ge=1, description="Maximum results per query")
    search_prefix: bool = Field(default=True, description="Enable prefix matching on the last query term")
    search_placeholder: str = Field(default=DEFAULT_PLACEHOLDER, description="Search input placeholder")
    search_hotkey: str = Field(default=DEFAULT_HOTKEY, description="Key that focuses the search input")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _normalize_base(self) -> "Settings":
        if not self.base.startswith("/"):
            self.base = "/" + self.base
        return self

    def resolved_out_dir(self) -> Path:
        return self.out_dir if self.out_dir is not None else self.site_dir

    def search_config(self) -> SearchConfig:
        return SearchConfig(
            enabled=self.search_enabled,
            limit=self.search_limit,
            prefix=self.search_prefix,
            placeholder=self.search_placeholder,
            hotkey=self.search_hotkey,
        )
