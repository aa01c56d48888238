from click.testing import CliRunner

from quire import __version__
from quire.__main__ import main as module_main
from quire.cli import cli, main


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _make_project(root):
    _write(
        root / "content" / "posts" / "2014" / "some-post.md",
        "---\ntitle: Some Post\ndate: 2014-01-06\n---\n## It is markdown.\n",
    )
    _write(
        root / "content" / "posts" / "2024" / "test-1-two" / "index.md",
        "---\ntitle: Index Post\n---\nThis is an index post.\n",
    )
    _write(root / "content" / "pages" / "about.md", "No frontmatter here.\n")
    _write(root / "content" / "_drafts" / "wip.md", "---\ntitle: [broken\n---\n")


def test_cli_check(monkeypatch, tmp_path):
    _make_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "pages: 1 items" in result.output
    assert "posts: 2 items" in result.output
    assert "Loaded 3 items from 2 collections" in result.output


def test_cli_check_reports_failures(monkeypatch, tmp_path):
    _make_project(tmp_path)
    _write(tmp_path / "content" / "posts" / "bad.md", "---\ntitle: [unclosed\n---\nbody")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "Load failed:" in result.output
    assert "File: posts/bad.md" in result.output
    assert "failed to parse frontmatter" in result.output


def test_cli_check_uses_config(monkeypatch, tmp_path):
    _write(tmp_path / "site" / "notes" / "a.md", "---\ntitle: A\n---\nA\n")
    _write(tmp_path / "quire.yaml", "content_dir: site\n")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "notes: 1 items" in result.output


def test_cli_check_without_content_dir(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code != 0
    assert "No content directory found" in result.output


def test_cli_invalid_config(monkeypatch, tmp_path):
    _make_project(tmp_path)
    _write(tmp_path / "quire.yaml", "- just\n- a list\n")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code != 0
    assert "expected a mapping" in result.output


def test_cli_list(monkeypatch, tmp_path):
    _make_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["list", "posts"], catch_exceptions=False)
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "2014/some-post\tSome Post",
        "2024/test-1-two\tIndex Post",
    ]


def test_cli_list_missing_collection(monkeypatch, tmp_path):
    _make_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["list", "recipes"])
    assert result.exit_code == 1
    assert "content directory is missing" in result.output


def test_cli_render(monkeypatch, tmp_path):
    _make_project(tmp_path)
    _write(
        tmp_path / "content" / "posts" / "2020" / "images.md",
        "![relative](./images/test.jpg) and [[other]]\n",
    )
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(
        cli, ["render", "content/posts/2020/images.md"], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert '<img src="/content/posts/2020/images/test.jpg" alt="relative">' in result.output
    assert '<a href="other.html">other</a>' in result.output


def test_cli_render_outside_content_dir(monkeypatch, tmp_path):
    _write(tmp_path / "notes" / "a.md", "## Heading\n")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["render", "notes/a.md"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "<h2>Heading</h2>" in result.output


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_main_entry_points():
    assert callable(main)
    assert module_main is main
