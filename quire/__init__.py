"""Quire content collections.

This package loads directories of Markdown files with YAML frontmatter into
typed collections of rendered HTML. Relative image references and
Obsidian-style image embeds are resolved against each file's directory, and
wikilinks can be routed through a caller-supplied resolver.

The main entry points are ``load_items`` and ``get_items``; the CLI module
offers commands to check, list and render content from a shell.
"""

from .config import LoadOptions, load_config
from .content import (
    ContentItem,
    ContentLoadError,
    ContentNotLoadedError,
    ContentStore,
    ContentTypeMismatchError,
    clear_items,
    default_store,
    get_items,
    load_items,
)
from .filesystem import DirectoryFS, MemoryFS

__all__ = [
    "ContentItem",
    "ContentLoadError",
    "ContentNotLoadedError",
    "ContentStore",
    "ContentTypeMismatchError",
    "DirectoryFS",
    "LoadOptions",
    "MemoryFS",
    "__version__",
    "clear_items",
    "default_store",
    "get_items",
    "load_config",
    "load_items",
]
__version__ = "0.1.0"
