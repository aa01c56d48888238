"""Markdown rendering for Quire.

This module turns the Markdown body of a content file into HTML. It builds
on mistune's HTML renderer and overrides a handful of node types:

- Images get their ``src`` resolved against the document's directory and
  may be passed through an image callback (asset fingerprinting, CDNs).
- Wikilink embeds of images (``![[photo.png]]``) render as images.
- Wikilinks (``[[page]]``) link through a caller-supplied resolver.
- Fenced code blocks are highlighted with Pygments.

Key classes:
- RenderContext: State scoped to one document render.
- ContentRenderer: mistune renderer with the node overrides above.
- MarkdownRenderer: Facade that renders one document to HTML.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from typing import Any

import mistune
from mistune.util import escape_url, safe_entity

from .highlighting import CodeHighlighter
from .protocols import ImageCallback, LinkResolver
from .resolver import resolve_target
from .wikilinks import EMBED_IMAGE_EXTENSIONS, wikilinks

DEFAULT_PLUGINS = ("strikethrough", "mark", "footnotes", "table", "url", "task_lists")

# Returned by mistune's safe_url for a destination it refuses
HARMFUL_LINK = "#harmful-link"

# Extra attributes an image token may carry into the rendered tag
IMAGE_ATTRIBUTES = frozenset(
    {
        "align",
        "border",
        "class",
        "crossorigin",
        "decoding",
        "height",
        "id",
        "ismap",
        "loading",
        "referrerpolicy",
        "sizes",
        "srcset",
        "style",
        "usemap",
        "width",
    }
)


def node_text(tokens: Iterable[dict[str, Any]]) -> str:
    """Flatten inline tokens into HTML-safe text for an ``alt`` attribute.

    Leaf tokens, code spans included, contribute their text escaped exactly
    once whether or not the parser already escaped it. Tokens with children
    are flattened recursively.

    Args:
        tokens: Child tokens of an image.

    Returns:
        The flattened text.
    """
    parts: list[str] = []
    for token in tokens:
        children = token.get("children")
        if children:
            parts.append(node_text(children))
        else:
            parts.append(safe_entity(token.get("raw", "")))
    return "".join(parts)


class RenderContext:
    """State scoped to a single document render.

    One context is created per ``mistune.Markdown.parse`` call and stored in
    that call's block state, so concurrent renders never share it.

    Attributes:
        open_anchors: Wikilink tokens whose ``<a>`` tag is still open.
        highlighted: Whether any code block was highlighted.
    """

    ENV_KEY = "quire.render_context"

    def __init__(self):
        self.open_anchors: set[int] = set()
        self.highlighted = False

    @classmethod
    def of(cls, state) -> RenderContext:
        """Return the context attached to a block state, creating it once."""
        context = state.env.get(cls.ENV_KEY)
        if context is None:
            context = cls()
            state.env[cls.ENV_KEY] = context
        return context


class ContentRenderer(mistune.HTMLRenderer):
    """HTML renderer for content files.

    Node types listed in the handler table are rendered here. A handler
    that returns None leaves the node to mistune's default rendering.

    Attributes:
        parent_path: Base directory for resolving relative targets.
        image_callback: Optional post-processor for rendered image tags.
        link_resolver: Optional resolver from wikilink target to URL.
        highlighter: Optional code highlighter.
        xhtml: Whether to self-close void tags.
        unsafe: Whether dangerous URLs are allowed.
    """

    def __init__(
        self,
        parent_path: str,
        image_callback: ImageCallback | None = None,
        link_resolver: LinkResolver | None = None,
        highlighter: CodeHighlighter | None = None,
        xhtml: bool = False,
        unsafe: bool = False,
    ):
        super().__init__(escape=False, allow_harmful_protocols=True if unsafe else None)
        self.parent_path = parent_path
        self.image_callback = image_callback
        self.link_resolver = link_resolver
        self.highlighter = highlighter
        self.xhtml = xhtml
        self.unsafe = unsafe
        self._handlers = {
            "image": self._render_image,
            "wikilink": self._render_wikilink,
            "block_code": self._render_block_code,
        }

    def render_token(self, token: dict[str, Any], state) -> str:
        handler = self._handlers.get(token["type"])
        if handler is not None:
            rendered = handler(token, state)
            if rendered is not None:
                return rendered
        return super().render_token(token, state)

    def is_dangerous_url(self, url: str) -> bool:
        """Check a destination against mistune's protocol policy."""
        if self.unsafe:
            return False
        return self.safe_url(url) == HARMFUL_LINK

    def _render_image(self, token: dict[str, Any], state) -> str:
        attrs = dict(token.get("attrs") or {})
        url = attrs.pop("url", "") or ""
        title = attrs.pop("title", None)
        src = "" if self.is_dangerous_url(url) else resolve_target(url, self.parent_path)
        alt = node_text(token.get("children") or [])
        return self._image_tag(src, alt, title, attrs)

    def _render_wikilink(self, token: dict[str, Any], state) -> str | None:
        attrs = token.get("attrs") or {}
        if attrs.get("embed"):
            return self._render_embed(attrs)
        if self.link_resolver is None:
            return None

        context = RenderContext.of(state)
        html = self._enter_wikilink(token, context)
        html += self.render_tokens(token.get("children") or [], state)
        html += self._exit_wikilink(token, context)
        return html

    def _enter_wikilink(self, token: dict[str, Any], context: RenderContext) -> str:
        attrs = token["attrs"]
        # A bare fragment links within the current document
        href = self.link_resolver(attrs["target"]) if attrs["target"] else ""
        if attrs.get("fragment"):
            href = f"{href}#{attrs['fragment']}"
        context.open_anchors.add(id(token))
        return f'<a href="{safe_entity(escape_url(href))}">'

    def _exit_wikilink(self, token: dict[str, Any], context: RenderContext) -> str:
        if id(token) not in context.open_anchors:
            return ""
        context.open_anchors.discard(id(token))
        return "</a>"

    def _render_embed(self, attrs: dict[str, Any]) -> str | None:
        # Only the basename resolves; directories in the target are ignored
        basename = posixpath.basename(attrs.get("target", "").rstrip("/"))
        ext = posixpath.splitext(basename)[1].lower()
        if ext not in EMBED_IMAGE_EXTENSIONS:
            return None
        src = resolve_target(escape_url(basename), self.parent_path)
        return self._image_tag(src, safe_entity(basename))

    def _render_block_code(self, token: dict[str, Any], state) -> str | None:
        if self.highlighter is None:
            return None
        code = token.get("raw", "")
        info = (token.get("attrs") or {}).get("info")
        highlighted = self.highlighter.highlight(code, info)
        if highlighted is None:
            return self.highlighter.plain(code, info)
        RenderContext.of(state).highlighted = True
        return highlighted

    def _image_tag(
        self,
        src: str,
        alt: str,
        title: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> str:
        tag = f'<img src="{safe_entity(src)}" alt="{alt}"'
        if title:
            tag += f' title="{safe_entity(title)}"'
        for name, value in (extra or {}).items():
            if name in IMAGE_ATTRIBUTES and value is not None:
                tag += f' {name}="{safe_entity(str(value))}"'
        tag += " />" if self.xhtml else ">"
        if self.image_callback is not None:
            tag = self.image_callback(tag)
        return tag


class MarkdownRenderer:
    """Renders Markdown documents to HTML.

    A fresh mistune instance and ``ContentRenderer`` are built for every
    document, since the base path differs per file.

    Attributes:
        highlighter: Code highlighter, or None to leave code unhighlighted.
        xhtml: Whether to self-close void tags.
        unsafe: Whether dangerous URLs are allowed.
        plugins: mistune plugins enabled besides wikilinks.
    """

    def __init__(
        self,
        highlighter: CodeHighlighter | None = None,
        xhtml: bool = False,
        unsafe: bool = False,
        plugins: Iterable[str] = DEFAULT_PLUGINS,
    ):
        self.highlighter = highlighter
        self.xhtml = xhtml
        self.unsafe = unsafe
        self.plugins = list(plugins)

    def create_markdown(
        self,
        parent_path: str,
        image_callback: ImageCallback | None = None,
        link_resolver: LinkResolver | None = None,
    ) -> mistune.Markdown:
        """Build a mistune instance for one document."""
        renderer = ContentRenderer(
            parent_path,
            image_callback=image_callback,
            link_resolver=link_resolver,
            highlighter=self.highlighter,
            xhtml=self.xhtml,
            unsafe=self.unsafe,
        )
        return mistune.create_markdown(
            renderer=renderer, plugins=[*self.plugins, wikilinks]
        )

    def render(
        self,
        body: str,
        parent_path: str,
        image_callback: ImageCallback | None = None,
        link_resolver: LinkResolver | None = None,
    ) -> str:
        """Render a Markdown body to HTML.

        When code was highlighted, the highlighting stylesheet is appended
        in a ``<style>`` element.

        Args:
            body: Markdown source without frontmatter.
            parent_path: Base directory for resolving relative targets.
            image_callback: Optional post-processor for image tags.
            link_resolver: Optional resolver for wikilink targets.

        Returns:
            Rendered HTML.
        """
        markdown = self.create_markdown(parent_path, image_callback, link_resolver)
        html, state = markdown.parse(body)
        if RenderContext.of(state).highlighted:
            html += f"<style>{self.highlighter.stylesheet()}</style>"
        return html
