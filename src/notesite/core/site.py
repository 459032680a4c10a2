"""Site configuration: schema, TOML loader and writer"""

import tomllib
from pathlib import Path
from typing import Any, Optional

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from notesite.core.errors import SiteConfigError


DEFAULT_TAXONOMIES = {"tag": "tags", "category": "categories"}
LIST_KINDS = ("home", "section", "taxonomy", "term")


class MenuEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name:       str
    url:        str
    weight:     int = 0
    identifier: Optional[str] = None


class LanguageConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    language_name: Optional[str] = Field(default=None, alias="languageName")
    weight:        int = 0
    taxonomies:    dict[str, str] = Field(default_factory=dict)
    menu:          dict[str, list[MenuEntry]] = Field(default_factory=dict)


class SiteConfig(BaseModel):
    """Singleton site record; keys keep their on-disk spelling via aliases."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    base_url:         str = Field(default="/", alias="baseURL")
    language_code:    str = Field(default="en-us", alias="languageCode")
    title:            str = ""
    copyright:        str = ""
    theme:            Optional[str] = None
    main_sections:    list[str] = Field(default_factory=list, alias="mainsections")
    enable_robots_txt: bool = Field(default=False, alias="enableRobotsTXT")
    build_drafts:     bool = Field(default=False, alias="buildDrafts")
    build_future:     bool = Field(default=False, alias="buildFuture")
    paginate:         int = Field(default=10, ge=1)
    taxonomies:       dict[str, str] = Field(default_factory=dict)
    outputs:          dict[str, list[str]] = Field(default_factory=dict)
    languages:        dict[str, LanguageConfig] = Field(default_factory=dict)
    menu:             dict[str, list[MenuEntry]] = Field(default_factory=dict)
    params:           dict[str, Any] = Field(default_factory=dict)

    @property
    def default_language(self) -> Optional[str]:
        """Key of the lowest-weight language, ties broken by key."""
        if not self.languages:
            return None
        return min(self.languages.items(), key=lambda kv: (kv[1].weight, kv[0]))[0]

    def effective_taxonomies(self) -> dict[str, str]:
        """singular -> plural taxonomy names for the default language."""
        lang = self.default_language
        if lang and self.languages[lang].taxonomies:
            return dict(self.languages[lang].taxonomies)
        if self.taxonomies:
            return dict(self.taxonomies)
        return dict(DEFAULT_TAXONOMIES)

    def menu_entries(self, name: str = "main") -> list[MenuEntry]:
        """Language menu merged with the top-level menu, ordered by weight then name."""
        entries = list(self.menu.get(name, []))
        lang = self.default_language
        if lang:
            entries.extend(self.languages[lang].menu.get(name, []))
        return sorted(entries, key=lambda e: (e.weight, e.name))

    def output_formats(self, kind: str) -> list[str]:
        """Output formats for a page kind, upper-cased; Hugo defaults when unset."""
        if kind in self.outputs:
            return [f.upper() for f in self.outputs[kind]]
        return ["HTML", "RSS"] if kind in LIST_KINDS else ["HTML"]

    def param(self, name: str, default: Any = None) -> Any:
        """Case-insensitive lookup into params."""
        if name in self.params:
            return self.params[name]
        lowered = name.lower()
        for key, value in self.params.items():
            if key.lower() == lowered:
                return value
        return default

    def abs_url(self, path: str) -> str:
        """Join a site-relative path onto baseURL."""
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


def load_site_config(path: Path) -> SiteConfig:
    """Parse a TOML site configuration file into a SiteConfig."""
    path = Path(path)
    if not path.exists():
        raise SiteConfigError("site configuration not found", path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise SiteConfigError(f"invalid TOML: {e}", path) from e
    try:
        return SiteConfig.model_validate(data)
    except ValidationError as e:
        raise SiteConfigError(f"invalid site configuration: {e}", path) from e


def dump_site_config(config: SiteConfig) -> str:
    """Serialize config to TOML, leaving out keys that hold their default."""
    data = config.model_dump(by_alias=True, exclude_defaults=True, exclude_none=True)
    return tomli_w.dumps(data)


def write_site_config(path: Path, config: SiteConfig) -> None:
    """Write config back to a TOML file."""
    Path(path).write_text(dump_site_config(config), encoding="utf-8")
