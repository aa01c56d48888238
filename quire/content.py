"""Content collections for Quire.

This module loads a directory of Markdown files into a typed collection
and keeps the loaded collections in a store for later lookup.

Key classes:
- ContentItem: One rendered content file.
- FileContentLoader: Discovers Markdown files below a content root.
- ContentItemBuilder: Builds a ContentItem from one file.
- ContentStore: Registry of loaded collections, keyed by metadata type.

Loading is all-or-nothing: a collection is only visible in the store once
every file in it has been read, split and rendered. A failed load leaves
the collection unloaded.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .config import LoadOptions
from .extractors import FrontmatterError, extract_metadata
from .filesystem import ROOT, DirectoryFS, clean_path
from .highlighting import CodeHighlighter
from .protocols import ContentFS, ImageCallback, LinkResolver
from .renderers import MarkdownRenderer
from .resolver import parent_path_for

logger = logging.getLogger(__name__)

T = TypeVar("T")

MARKDOWN_SUFFIX = ".md"
INDEX_SUFFIX = "/index"


class ContentLoadError(Exception):
    """Error while loading a content collection, with file context.

    Attributes:
        source_path: Path of the file or directory that failed.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class ContentNotLoadedError(LookupError):
    """Error raised when reading a collection that has not been loaded."""


class ContentTypeMismatchError(TypeError):
    """Error raised when a collection is read with the wrong metadata type."""


@dataclass(frozen=True)
class ContentItem(Generic[T]):
    """A rendered content file.

    Attributes:
        meta: Metadata decoded from the frontmatter.
        content: Markdown body with the frontmatter removed.
        html: Rendered HTML, including any highlighting stylesheet.
        slug: Routing path derived from the file path.
    """

    meta: T
    content: str
    html: str
    slug: str


def derive_slug(path: str, root_dir: str) -> str:
    """Derive a routing slug from a content file's path.

    The path is made relative to the content root, the ``.md`` suffix is
    dropped, and a trailing ``/index`` is dropped after that.

    Args:
        path: Slash-separated path of the file.
        root_dir: Content root the file was found under.

    Returns:
        The slug.

    Examples:
        >>> derive_slug("posts/2014/some-post.md", "posts")
        '2014/some-post'

        >>> derive_slug("posts/2024/test-1-two/index.md", "posts")
        '2024/test-1-two'
    """
    root = clean_path(root_dir)
    rel = path if root == ROOT else path.removeprefix(f"{root}/")
    rel = rel.removesuffix(MARKDOWN_SUFFIX)
    return rel.removesuffix(INDEX_SUFFIX)


def as_content_fs(fs: ContentFS | str | os.PathLike) -> ContentFS:
    """Return ``fs`` as a ContentFS, wrapping directory paths."""
    if isinstance(fs, (str, os.PathLike)):
        return DirectoryFS(fs)
    if isinstance(fs, ContentFS):
        return fs
    raise TypeError(f"expected a ContentFS or a directory path, got {type(fs).__name__}")


def _check_meta_type(meta_type: Any) -> None:
    if meta_type is dict:
        return
    if isinstance(meta_type, type) and dataclasses.is_dataclass(meta_type):
        return
    raise TypeError(f"metadata type must be a dataclass or dict, got {meta_type!r}")


def _type_name(meta_type: Any) -> str:
    return getattr(meta_type, "__qualname__", repr(meta_type))


class FileContentLoader:
    """Discovers Markdown files below a content root.

    Attributes:
        fs: Filesystem to walk.
        root_dir: Content root inside the filesystem.
    """

    def __init__(self, fs: ContentFS, root_dir: str):
        self.fs = fs
        self.root_dir = root_dir

    def iter_files(self) -> list[str]:
        """List the Markdown files below the content root.

        Returns:
            File paths in walk order.

        Raises:
            ContentLoadError: If the root is missing or invalid, is not a
                directory, or cannot be walked.
        """
        files: list[str] = []
        walker = self.fs.walk(self.root_dir)
        try:
            root = next(walker)
        except FileNotFoundError as exc:
            raise ContentLoadError(
                self.root_dir, "content directory is missing", exc
            ) from exc
        except OSError as exc:
            raise ContentLoadError(self.root_dir, "failed to walk directory", exc) from exc
        except ValueError as exc:
            raise ContentLoadError(
                self.root_dir, f"invalid content directory: {exc}", exc
            ) from exc
        if not root.is_dir:
            raise ContentLoadError(self.root_dir, "content root is not a directory")

        path = root.path
        try:
            for entry in walker:
                path = entry.path
                logger.debug("Walking directory path=%s", path)
                if entry.is_dir or not entry.name.endswith(MARKDOWN_SUFFIX):
                    continue
                files.append(entry.path)
        except OSError as exc:
            raise ContentLoadError(path, "failed to walk directory", exc) from exc
        return files


class ContentItemBuilder:
    """Builds ContentItem objects from content files.

    Attributes:
        fs: Filesystem the files are read from.
        root_dir: Content root, used for slugs.
        meta_type: Metadata class for the frontmatter.
        options: Load and render settings.
        image_callback: Optional post-processor for image tags.
        link_resolver: Optional resolver for wikilink targets.
        markdown: Markdown renderer shared by every file.
    """

    def __init__(
        self,
        fs: ContentFS,
        root_dir: str,
        meta_type: type,
        options: LoadOptions | None = None,
        image_callback: ImageCallback | None = None,
        link_resolver: LinkResolver | None = None,
        markdown: MarkdownRenderer | None = None,
    ):
        self.fs = fs
        self.root_dir = root_dir
        self.meta_type = meta_type
        self.options = options or LoadOptions()
        self.image_callback = image_callback
        self.link_resolver = link_resolver
        self.markdown = markdown or self._default_markdown(self.options)

    @staticmethod
    def _default_markdown(options: LoadOptions) -> MarkdownRenderer:
        highlighter = None
        if options.highlight_style:
            highlighter = CodeHighlighter(
                options.highlight_style, guess_language=options.guess_language
            )
        return MarkdownRenderer(
            highlighter=highlighter, xhtml=options.xhtml, unsafe=options.unsafe
        )

    def build(self, path: str) -> ContentItem:
        """Build a ContentItem from one file.

        Args:
            path: Path of the Markdown file.

        Returns:
            The rendered item.

        Raises:
            ContentLoadError: If the file cannot be read, split or rendered.
        """
        try:
            text = self.fs.read_bytes(path).decode("utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ContentLoadError(path, "failed to read content file", exc) from exc

        try:
            meta, body = extract_metadata(
                text, self.meta_type, strict=self.options.strict_frontmatter
            )
        except FrontmatterError as exc:
            raise ContentLoadError(path, f"failed to parse frontmatter: {exc}", exc) from exc

        parent_path = parent_path_for(path, self.options.url_prefix)
        try:
            html = self.markdown.render(
                body,
                parent_path,
                image_callback=self.image_callback,
                link_resolver=self.link_resolver,
            )
        except Exception as exc:
            raise ContentLoadError(path, f"failed to render markdown: {exc}", exc) from exc

        return ContentItem(
            meta=meta,
            content=body,
            html=html,
            slug=derive_slug(path, self.root_dir),
        )


@dataclass(frozen=True)
class _StoreEntry:
    meta_type: Any
    items: tuple[ContentItem, ...]


class ContentStore:
    """Registry of loaded content collections.

    A collection is keyed by its metadata type, or by an explicit key when
    one metadata type backs several collections. Callers must pair a key
    with the same metadata type on load and read; a mismatched read raises
    ContentTypeMismatchError.

    Loads replace a collection wholesale. Loading the same collection from
    two threads at once is not supported; reads may run concurrently with
    loads of other collections and never see a partial list.
    """

    def __init__(self):
        self._entries: dict[Any, _StoreEntry] = {}

    def load(
        self,
        meta_type: type[T],
        fs: ContentFS | str | os.PathLike,
        root_dir: str,
        *,
        key: Any = None,
        options: LoadOptions | None = None,
        image_callback: ImageCallback | None = None,
        link_resolver: LinkResolver | None = None,
    ) -> list[ContentItem[T]]:
        """Load every Markdown file below ``root_dir`` into a collection.

        The previous list for the collection is dropped before the walk
        starts. The new list is installed once every file has succeeded;
        on failure the collection stays unloaded.

        Args:
            meta_type: Dataclass (or ``dict``) to decode frontmatter into.
            fs: Filesystem, or a directory path on disk.
            root_dir: Content root inside the filesystem.
            key: Store key, defaulting to ``meta_type``.
            options: Load and render settings.
            image_callback: Optional post-processor for image tags.
            link_resolver: Optional resolver for wikilink targets.

        Returns:
            The loaded items, in walk order.

        Raises:
            ContentLoadError: If any file or the walk fails.
            TypeError: If ``meta_type`` is not a dataclass or ``dict``.
        """
        _check_meta_type(meta_type)
        store_key = meta_type if key is None else key
        fsys = as_content_fs(fs)
        self._entries.pop(store_key, None)

        logger.info("Loading content type=%s dir=%s", _type_name(meta_type), root_dir)
        builder = ContentItemBuilder(
            fsys,
            root_dir,
            meta_type,
            options=options,
            image_callback=image_callback,
            link_resolver=link_resolver,
        )
        try:
            items = [
                builder.build(path)
                for path in FileContentLoader(fsys, root_dir).iter_files()
            ]
        except ContentLoadError as exc:
            logger.error(
                "Failed to load content type=%s error=%s", _type_name(meta_type), exc
            )
            raise

        self._entries[store_key] = _StoreEntry(meta_type, tuple(items))
        logger.info(
            "Loaded content type=%s items=%d", _type_name(meta_type), len(items)
        )
        return items

    def _entry(self, meta_type: Any, key: Any) -> _StoreEntry:
        store_key = meta_type if key is None else key
        entry = self._entries.get(store_key)
        if entry is None:
            raise ContentNotLoadedError(
                f"no items found for type {_type_name(meta_type)}, "
                "ensure load_items was called"
            )
        if entry.meta_type is not meta_type:
            raise ContentTypeMismatchError(
                f"collection {store_key!r} holds {_type_name(entry.meta_type)}, "
                f"not {_type_name(meta_type)}"
            )
        return entry

    def get_items(self, meta_type: type[T], *, key: Any = None) -> list[ContentItem[T]]:
        """Return the loaded items of a collection.

        Args:
            meta_type: Metadata type the collection was loaded with.
            key: Store key, defaulting to ``meta_type``.

        Returns:
            A new list of the collection's items.

        Raises:
            ContentNotLoadedError: If the collection has not been loaded.
            ContentTypeMismatchError: If it was loaded with another type.
        """
        return list(self._entry(meta_type, key).items)

    def is_loaded(self, meta_type: Any, *, key: Any = None) -> bool:
        """Check whether a collection is loaded with ``meta_type``."""
        store_key = meta_type if key is None else key
        entry = self._entries.get(store_key)
        return entry is not None and entry.meta_type is meta_type

    def clear(self, meta_type: Any = None, *, key: Any = None) -> None:
        """Drop one collection, or every collection when none is given."""
        if meta_type is None and key is None:
            self._entries.clear()
            return
        self._entries.pop(meta_type if key is None else key, None)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"ContentStore({len(self._entries)} collections)"


# Process-wide store used by the module-level helpers
default_store = ContentStore()


def load_items(
    meta_type: type[T],
    fs: ContentFS | str | os.PathLike,
    root_dir: str,
    **kwargs: Any,
) -> list[ContentItem[T]]:
    """Load a collection into the default store. See ``ContentStore.load``."""
    return default_store.load(meta_type, fs, root_dir, **kwargs)


def get_items(meta_type: type[T], *, key: Any = None) -> list[ContentItem[T]]:
    """Read a collection from the default store. See ``ContentStore.get_items``."""
    return default_store.get_items(meta_type, key=key)


def clear_items(meta_type: Any = None, *, key: Any = None) -> None:
    """Drop collections from the default store."""
    default_store.clear(meta_type, key=key)
