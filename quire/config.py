"""Configuration for Quire.

Settings live in an optional ``quire.yaml`` at the project root. Anything
not set there falls back to ``DEFAULT_CONFIG``.

Key functions:
- load_config: Read ``quire.yaml`` over the defaults.

Key classes:
- LoadOptions: The settings the content loader consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .highlighting import DEFAULT_STYLE

CONFIG_FILENAME = "quire.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content",
    "url_prefix": "/content",
    "highlight_style": DEFAULT_STYLE,
    "guess_language": True,
    "xhtml": False,
    "unsafe": False,
    "strict_frontmatter": False,
}


class ConfigError(ValueError):
    """Error raised when ``quire.yaml`` cannot be used."""


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from quire.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"{config_path}: invalid YAML: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_path}: expected a mapping")
        config.update(loaded)
    return config


@dataclass(frozen=True)
class LoadOptions:
    """Settings for loading and rendering a content collection.

    Attributes:
        url_prefix: Virtual directory content is served from; relative
            image targets resolve below it.
        highlight_style: Pygments style for the code stylesheet, or None
            to disable highlighting.
        guess_language: Guess the language of code blocks without one.
        xhtml: Self-close void tags.
        unsafe: Keep URLs with dangerous protocols.
        strict_frontmatter: Fail on files without a frontmatter block.
    """

    url_prefix: str = DEFAULT_CONFIG["url_prefix"]
    highlight_style: str | None = DEFAULT_CONFIG["highlight_style"]
    guess_language: bool = DEFAULT_CONFIG["guess_language"]
    xhtml: bool = DEFAULT_CONFIG["xhtml"]
    unsafe: bool = DEFAULT_CONFIG["unsafe"]
    strict_frontmatter: bool = DEFAULT_CONFIG["strict_frontmatter"]

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> LoadOptions:
        """Build options from a configuration dictionary."""
        return cls(
            url_prefix=str(config.get("url_prefix", cls.url_prefix)),
            highlight_style=config.get("highlight_style", cls.highlight_style),
            guess_language=bool(config.get("guess_language", cls.guess_language)),
            xhtml=bool(config.get("xhtml", cls.xhtml)),
            unsafe=bool(config.get("unsafe", cls.unsafe)),
            strict_frontmatter=bool(
                config.get("strict_frontmatter", cls.strict_frontmatter)
            ),
        )
