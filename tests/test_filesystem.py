import pytest

from quire.filesystem import DirectoryFS, FileEntry, MemoryFS, clean_path


def test_clean_path():
    assert clean_path("posts/./2024/") == "posts/2024"
    assert clean_path("") == "."
    assert clean_path(".") == "."
    with pytest.raises(ValueError):
        clean_path("../secret")
    with pytest.raises(ValueError):
        clean_path("/etc/passwd")


def test_memory_fs_walks_in_lexical_order():
    fs = MemoryFS(
        {
            "posts/b.md": "b",
            "posts/a/index.md": "a",
            "posts/c.txt": "c",
            "other/x.md": "x",
        }
    )
    paths = [entry.path for entry in fs.walk("posts")]
    assert paths == ["posts", "posts/a", "posts/a/index.md", "posts/b.md", "posts/c.txt"]
    entries = list(fs.walk("posts"))
    assert entries[0] == FileEntry("posts", True)
    assert entries[2].name == "index.md"
    assert not entries[2].is_dir


def test_memory_fs_walk_root():
    fs = MemoryFS({"a.md": "a", "dir/b.md": "b"})
    assert [e.path for e in fs.walk(".")] == [".", "a.md", "dir", "dir/b.md"]


def test_memory_fs_read_bytes():
    fs = MemoryFS({"posts/a.md": "héllo", "posts/raw.md": b"raw"})
    assert fs.read_bytes("posts/a.md") == "héllo".encode("utf-8")
    assert fs.read_bytes("posts/raw.md") == b"raw"
    with pytest.raises(FileNotFoundError):
        fs.read_bytes("posts/missing.md")


def test_memory_fs_missing_root():
    fs = MemoryFS({"posts/a.md": "a"})
    with pytest.raises(FileNotFoundError):
        list(fs.walk("pages"))


def test_directory_fs(tmp_path):
    (tmp_path / "posts" / "2024").mkdir(parents=True)
    (tmp_path / "posts" / "2024" / "b.md").write_text("b", encoding="utf-8")
    (tmp_path / "posts" / "a.md").write_text("a", encoding="utf-8")
    fs = DirectoryFS(tmp_path)

    paths = [entry.path for entry in fs.walk("posts")]
    assert paths == ["posts", "posts/2024", "posts/2024/b.md", "posts/a.md"]
    assert fs.read_bytes("posts/a.md") == b"a"

    root_paths = [entry.path for entry in fs.walk(".")]
    assert root_paths[:2] == [".", "posts"]


def test_directory_fs_missing_root(tmp_path):
    fs = DirectoryFS(tmp_path)
    with pytest.raises(FileNotFoundError):
        list(fs.walk("nope"))


def test_directory_fs_rejects_escaping_paths(tmp_path):
    fs = DirectoryFS(tmp_path / "content")
    with pytest.raises(ValueError):
        fs.read_bytes("../outside.md")
