"""Protocol definitions for Quire.

These are the seams between the content pipeline and the system around it:
where content files come from, and how rendered output is post-processed.
Any object with the right shape can be plugged in.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .filesystem import FileEntry


@runtime_checkable
class ContentFS(Protocol):
    """Read-only filesystem the loader walks.

    Paths are slash-separated and relative to the filesystem root, with
    ``"."`` naming the root itself.
    """

    @abstractmethod
    def walk(self, root: str) -> Iterator[FileEntry]:
        """Walk the tree below ``root``.

        Yields ``root`` first, then every entry below it depth-first, with
        the entries of each directory in lexical order.

        Raises:
            FileNotFoundError: If ``root`` does not exist.
            OSError: If a directory cannot be read.
        """
        ...

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Return the contents of the file at ``path``.

        Raises:
            FileNotFoundError: If there is no such file.
        """
        ...


@runtime_checkable
class ImageCallback(Protocol):
    """Post-processor for rendered image tags.

    Receives a complete ``<img>`` tag and returns the tag to write, for
    example with ``src`` pointing at a fingerprinted asset.
    """

    def __call__(self, image_tag: str) -> str: ...


@runtime_checkable
class LinkResolver(Protocol):
    """Maps a wikilink target to the URL of the linked document."""

    def __call__(self, target: str) -> str: ...
