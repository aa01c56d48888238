from dataclasses import dataclass, field
from datetime import date

import pytest

from quire.extractors import (
    FrontmatterError,
    decode_metadata,
    extract_metadata,
    split_frontmatter,
)


@dataclass
class Post:
    title: str
    date: str
    description: str = ""


@dataclass
class Note:
    title: str
    tags: list[str]
    draft: bool
    weight: int
    score: float
    summary: str = "none"
    extra: dict = field(default_factory=dict)


@dataclass
class Renamed:
    published_on: str = field(default="", metadata={"key": "date"})


def test_split_frontmatter():
    data, body = split_frontmatter("---\ntitle: Test\n---\nContent")
    assert data == {"title": "Test"}
    assert body == "Content"


def test_split_keeps_body_exactly():
    text = "---\ntitle: Some Post\n---\nThis is the content.\n\n## It is markdown."
    _, body = split_frontmatter(text)
    assert body == "This is the content.\n\n## It is markdown."


def test_split_empty_block():
    data, body = split_frontmatter("---\n---\nBody")
    assert data == {}
    assert body == "Body"


def test_split_without_frontmatter():
    data, body = split_frontmatter("# Just markdown\n")
    assert data == {}
    assert body == "# Just markdown\n"


def test_split_strict_requires_block():
    with pytest.raises(FrontmatterError, match="missing"):
        split_frontmatter("# Just markdown\n", strict=True)


def test_split_unterminated_block():
    with pytest.raises(FrontmatterError, match="not terminated"):
        split_frontmatter("---\ntitle: Test\nContent")


def test_split_invalid_yaml():
    with pytest.raises(FrontmatterError, match="invalid YAML"):
        split_frontmatter("---\ntitle: [unclosed\n---\nContent")


def test_split_non_mapping():
    with pytest.raises(FrontmatterError, match="mapping"):
        split_frontmatter("---\n- a\n- b\n---\nContent")


def test_decode_dataclass_stringifies_dates():
    post = decode_metadata(Post, {"title": "Some Post", "date": date(2014, 1, 6)})
    assert post == Post(title="Some Post", date="2014-01-06")


def test_decode_ignores_unknown_keys():
    post = decode_metadata(Post, {"title": "A", "date": "x", "author": "me"})
    assert post.title == "A"
    assert not hasattr(post, "author")


def test_decode_zero_values_for_missing_fields():
    note = decode_metadata(Note, {})
    assert note.title == ""
    assert note.tags == []
    assert note.draft is False
    assert note.weight == 0
    assert note.score == 0.0
    assert note.summary == "none"
    assert note.extra == {}


def test_decode_rejects_wrong_kinds():
    with pytest.raises(FrontmatterError, match="draft"):
        decode_metadata(Note, {"draft": "maybe"})
    with pytest.raises(FrontmatterError, match="tags"):
        decode_metadata(Note, {"tags": "python"})
    with pytest.raises(FrontmatterError, match="weight"):
        decode_metadata(Note, {"weight": True})


def test_decode_uses_field_key_metadata():
    renamed = decode_metadata(Renamed, {"date": "2024-01-01"})
    assert renamed.published_on == "2024-01-01"


def test_decode_dict_returns_copy():
    data = {"title": "A"}
    result = decode_metadata(dict, data)
    assert result == data
    assert result is not data


def test_decode_rejects_other_types():
    with pytest.raises(TypeError):
        decode_metadata(str, {})


def test_extract_metadata():
    meta, body = extract_metadata(
        "---\ntitle: Some Post\ndate: 2014-01-06\n---\nBody", Post
    )
    assert meta.title == "Some Post"
    assert meta.date == "2014-01-06"
    assert body == "Body"
