"""Obsidian-style wikilink syntax for mistune.

Adds a ``wikilink`` inline token to the Markdown parser:

- ``[[target]]`` and ``[[target|label]]`` link to another document.
- ``[[target#heading]]`` links to a fragment inside a document.
- ``![[target]]`` embeds the target (an image, usually).

The plugin also registers a default HTML rendering for the token. Renderers
that need different output override it per node (see ``renderers.py``).
"""

from __future__ import annotations

import posixpath
import re

from mistune.util import escape_url, safe_entity

WIKILINK_PATTERN = (
    r"(?P<wikilink_embed>!?)\[\[(?P<wikilink_body>[^\[\]\n]+?)\]\]"
)

EMBED_IMAGE_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp", ".mp4"}
)

_LABEL_SEPARATOR = "|"
_FRAGMENT_SEPARATOR = "#"
_DEFAULT_SUFFIX = ".html"
_BLANK_RE = re.compile(r"^\s*$")


def split_wikilink(body: str) -> tuple[str, str, str]:
    """Split the inside of ``[[...]]`` into target, fragment and label.

    Args:
        body: Text between the double brackets.

    Returns:
        Tuple of (target, fragment, label). The label defaults to the text
        before the ``|`` separator.

    Examples:
        >>> split_wikilink("notes/page#intro|Read this")
        ('notes/page', 'intro', 'Read this')

        >>> split_wikilink("photo.png")
        ('photo.png', '', 'photo.png')
    """
    reference, _, label = body.partition(_LABEL_SEPARATOR)
    reference = reference.strip()
    target, _, fragment = reference.partition(_FRAGMENT_SEPARATOR)
    label = label.strip() or reference
    return target.strip(), fragment.strip(), label


def parse_wikilink(inline, m: re.Match, state) -> int:
    """Parse a wikilink match into a ``wikilink`` token."""
    pos = m.end()
    body = m.group("wikilink_body")
    if state.in_link or _BLANK_RE.match(body):
        inline.process_text(m.group(0), state)
        return pos

    target, fragment, label = split_wikilink(body)
    new_state = state.copy()
    new_state.src = label
    new_state.in_link = True
    state.append_token(
        {
            "type": "wikilink",
            "children": inline.render(new_state),
            "attrs": {
                "target": target,
                "fragment": fragment,
                "embed": m.group("wikilink_embed") == "!",
            },
        }
    )
    return pos


def wikilink_href(target: str, fragment: str = "") -> str:
    """Return the default, unescaped href for a wikilink target."""
    href = f"{target}{_DEFAULT_SUFFIX}" if target else ""
    if fragment:
        href = f"{href}#{fragment}"
    return href


def render_wikilink(
    renderer, text: str, target: str, fragment: str = "", embed: bool = False
) -> str:
    """Render a wikilink token with the default HTML output.

    Image embeds become ``<img>`` tags pointing at the raw target, every
    other wikilink becomes an anchor to ``target.html``.
    """
    ext = posixpath.splitext(target)[1].lower()
    if embed and ext in EMBED_IMAGE_EXTENSIONS:
        return f'<img src="{safe_entity(escape_url(target))}" alt="">'
    href = safe_entity(escape_url(wikilink_href(target, fragment)))
    return f'<a href="{href}">{text}</a>'


def wikilinks(md) -> None:
    """Mistune plugin enabling wikilink syntax.

    Args:
        md: A ``mistune.Markdown`` instance.
    """
    md.inline.register("wikilink", WIKILINK_PATTERN, parse_wikilink, before="link")
    if md.renderer and md.renderer.NAME == "html":
        md.renderer.register("wikilink", render_wikilink)
