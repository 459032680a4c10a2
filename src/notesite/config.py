"""Application configuration: settings schema and notesite.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "notesite.yaml"


class Settings(BaseModel):
    app_name:      str = "notesite"
    site_config:   str = Field(default="hugo.toml", description="TOML site configuration file")
    content_dir:   str = Field(default="content",   description="Directory holding Markdown content documents")
    output_dir:    str = Field(default="public",    description="Directory the rendered site is written to")
    db_url:        str = Field(default="sqlite:///.notesite/index.db", description="Content index database URL")
    parser_config: str = Field(default="gfm-like",  description="MarkdownIt parser preset name")
    build_drafts:  Optional[bool] = Field(default=None, description="Override the site's buildDrafts")
    build_future:  Optional[bool] = Field(default=None, description="Override the site's buildFuture")
    base_url:      Optional[str] = Field(default=None, description="Override the site's baseURL")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from notesite.yaml, then NOTESITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"NOTESITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
