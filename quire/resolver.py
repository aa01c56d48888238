"""Image and link target resolution for Quire.

Rendered content is served from a URL space that mirrors the content tree,
so a relative image reference in a Markdown file is rewritten against the
directory that file lives in. External and already-absolute targets are
left untouched.

Functions:
    resolve_target: Classify a target and rewrite it if it is relative.
    parent_path_for: Compute the base directory used for a content file.
"""

from __future__ import annotations

import posixpath

# Targets served from elsewhere, never rewritten
_HOTLINK_PREFIXES = ("http://", "https://")
_DATA_URL_PREFIX = "data:"


def resolve_target(target: str, parent_path: str) -> str:
    """Resolve an image or link target against a document's base path.

    Classification, first match wins:

    1. ``http://`` or ``https://`` URLs are returned unchanged.
    2. ``data:`` URLs are returned unchanged.
    3. Absolute paths are returned unchanged.
    4. Anything else is joined onto ``parent_path`` and normalized.

    Args:
        target: The destination as written in the Markdown source.
        parent_path: Base directory of the document being rendered.

    Returns:
        The resolved target.

    Examples:
        >>> resolve_target("./images/test.jpg", "/content/posts/2020")
        '/content/posts/2020/images/test.jpg'

        >>> resolve_target("https://example.com/a.png", "/content")
        'https://example.com/a.png'
    """
    if target.startswith(_HOTLINK_PREFIXES):
        return target
    if target.startswith(_DATA_URL_PREFIX):
        return target
    if posixpath.isabs(target):
        return target
    return posixpath.normpath(posixpath.join(parent_path, target))


def parent_path_for(path: str, url_prefix: str = "/content") -> str:
    """Return the base directory for a content file.

    The file's filesystem path is placed under ``url_prefix`` so that
    rendered URLs are stable regardless of where the content tree is
    mounted.

    Args:
        path: Slash-separated path of the file inside its filesystem.
        url_prefix: Virtual directory the content tree is served from.

    Returns:
        Directory portion of ``url_prefix/path``.

    Examples:
        >>> parent_path_for("posts/2020/images-test.md")
        '/content/posts/2020'
    """
    joined = posixpath.normpath(posixpath.join(url_prefix, path))
    return posixpath.dirname(joined)
