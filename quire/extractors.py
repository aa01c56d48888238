"""Frontmatter extraction for Quire.

Content files start with a YAML block between ``---`` fences. This module
splits that block from the Markdown body and decodes it into the metadata
type a collection declares.

Key functions:
- split_frontmatter: Split raw text into (frontmatter dict, body).
- decode_metadata: Build a metadata object from a frontmatter dict.
- extract_metadata: Both steps at once, for one file.
"""

from __future__ import annotations

import dataclasses
import re
import typing
from typing import Any

import yaml

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(?P<block>.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)
_OPENING_FENCE_RE = re.compile(r"\A---[ \t]*\r?\n")

# Zero values for missing fields, keyed by annotated type
_ZERO_VALUES: dict[Any, Any] = {
    str: "",
    int: 0,
    float: 0.0,
    bool: False,
}
_ZERO_FACTORIES: dict[Any, Any] = {
    list: list,
    dict: dict,
    set: set,
    tuple: tuple,
}


class FrontmatterError(ValueError):
    """Error raised when a file's frontmatter cannot be decoded."""


def split_frontmatter(text: str, strict: bool = False) -> tuple[dict[str, Any], str]:
    """Split YAML frontmatter from a Markdown body.

    Args:
        text: Raw file content.
        strict: Require a frontmatter block.

    Returns:
        Tuple of (frontmatter dict, body). The body is the text after the
        closing fence, unmodified.

    Raises:
        FrontmatterError: If the block is unterminated, is not valid YAML,
            or is not a mapping. Also raised for a missing block when
            ``strict`` is set.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        if _OPENING_FENCE_RE.match(text):
            raise FrontmatterError("frontmatter block is not terminated")
        if strict:
            raise FrontmatterError("missing frontmatter block")
        return {}, text

    try:
        data = yaml.safe_load(match.group("block") or "")
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"invalid YAML in frontmatter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"frontmatter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]


def _field_key(field: dataclasses.Field) -> str:
    return field.metadata.get("key", field.name)


def _zero_value(annotation: Any) -> Any:
    origin = typing.get_origin(annotation) or annotation
    if origin in _ZERO_VALUES:
        return _ZERO_VALUES[origin]
    if origin in _ZERO_FACTORIES:
        return _ZERO_FACTORIES[origin]()
    return None


def _coerce(name: str, annotation: Any, value: Any) -> Any:
    """Fit a YAML value into a field's annotated type.

    Scalars become strings for ``str`` fields, mirroring how a date such as
    ``2014-01-06`` is written in the source. Other mismatches are errors.
    """
    origin = typing.get_origin(annotation) or annotation
    if value is None:
        return _zero_value(annotation)
    if origin is str:
        if isinstance(value, (dict, list)):
            raise FrontmatterError(f"field '{name}' expects a string")
        return value if isinstance(value, str) else str(value)
    if origin is bool:
        if not isinstance(value, bool):
            raise FrontmatterError(f"field '{name}' expects a boolean")
        return value
    if origin is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise FrontmatterError(f"field '{name}' expects an integer")
        return value
    if origin is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FrontmatterError(f"field '{name}' expects a number")
        return float(value)
    if origin in (list, tuple, set):
        if not isinstance(value, list):
            raise FrontmatterError(f"field '{name}' expects a list")
        return origin(value)
    if origin is dict:
        if not isinstance(value, dict):
            raise FrontmatterError(f"field '{name}' expects a mapping")
        return value
    return value


def decode_metadata(meta_type: type, data: dict[str, Any]) -> Any:
    """Decode frontmatter into an instance of ``meta_type``.

    ``meta_type`` is a dataclass, or ``dict`` for untyped collections.
    A field reads the frontmatter key named after it, or the key given in
    its ``metadata={"key": ...}``. Unknown keys are ignored; missing fields
    use their default, falling back to the zero value of their type.

    Args:
        meta_type: The metadata class.
        data: Parsed frontmatter.

    Returns:
        The metadata object.

    Raises:
        FrontmatterError: If a value does not fit its field.
        TypeError: If ``meta_type`` is neither a dataclass nor ``dict``.
    """
    if meta_type is dict:
        return dict(data)
    if not dataclasses.is_dataclass(meta_type):
        raise TypeError(f"metadata type must be a dataclass or dict, got {meta_type!r}")

    hints = typing.get_type_hints(meta_type)
    values: dict[str, Any] = {}
    for field in dataclasses.fields(meta_type):
        if not field.init:
            continue
        annotation = hints.get(field.name, Any)
        key = _field_key(field)
        if key in data:
            values[field.name] = _coerce(key, annotation, data[key])
        elif (
            field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
        ):
            values[field.name] = _zero_value(annotation)
    return meta_type(**values)


def extract_metadata(
    text: str, meta_type: type, strict: bool = False
) -> tuple[Any, str]:
    """Split a content file and decode its frontmatter.

    Args:
        text: Raw file content.
        meta_type: The metadata class.
        strict: Require a frontmatter block.

    Returns:
        Tuple of (metadata object, Markdown body).
    """
    data, body = split_frontmatter(text, strict=strict)
    return decode_metadata(meta_type, data), body
