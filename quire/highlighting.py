"""Syntax highlighting for fenced code blocks.

Code is highlighted with Pygments using CSS classes rather than inline
styles, so a single stylesheet per document covers every block. The
stylesheet is produced by ``CodeHighlighter.stylesheet``.
"""

from __future__ import annotations

from mistune.util import escape
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

CSS_CLASS = "highlight"
DEFAULT_STYLE = "rrt"


class CodeHighlighter:
    """Highlights code blocks and builds the matching stylesheet.

    Attributes:
        style: Name of the Pygments style used for the stylesheet.
        guess_language: Whether to guess the lexer for blocks without an
            info string.
    """

    def __init__(self, style: str = DEFAULT_STYLE, guess_language: bool = True):
        self.style = style
        self.guess_language = guess_language

    def highlight(self, code: str, info: str | None = None) -> str | None:
        """Highlight a block of code.

        Args:
            code: The code content.
            info: Info string of the fenced block (language first).

        Returns:
            Highlighted HTML, or None when no lexer applies.
        """
        lang = info.split()[0] if info and info.strip() else ""
        try:
            if lang:
                lexer = get_lexer_by_name(lang, stripall=True)
            elif self.guess_language and code.strip():
                lexer = guess_lexer(code)
            else:
                return None
        except ClassNotFound:
            return None
        formatter = HtmlFormatter(nowrap=False, cssclass=CSS_CLASS)
        return highlight(code, lexer, formatter)

    def plain(self, code: str, info: str | None = None) -> str:
        """Render a code block without highlighting."""
        lang = info.split()[0] if info and info.strip() else ""
        lang_class = f' class="language-{escape(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape(code, quote=False)}</code></pre>\n"

    def stylesheet(self) -> str:
        """Return the CSS rules for highlighted blocks."""
        return HtmlFormatter(style=self.style, cssclass=CSS_CLASS).get_style_defs(
            f".{CSS_CLASS}"
        )
