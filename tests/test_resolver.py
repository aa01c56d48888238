from quire.resolver import parent_path_for, resolve_target

PARENT = "/content/posts/2020"


def test_hotlinks_are_unchanged():
    assert resolve_target("https://example.com/image.jpg", PARENT) == "https://example.com/image.jpg"
    assert resolve_target("http://example.com/a.png", PARENT) == "http://example.com/a.png"


def test_data_urls_are_unchanged():
    assert resolve_target("data:image/png;base64,abc123", PARENT) == "data:image/png;base64,abc123"


def test_absolute_paths_are_unchanged():
    assert resolve_target("/images/test.png", PARENT) == "/images/test.png"


def test_relative_paths_join_parent():
    assert resolve_target("./images/test.jpg", PARENT) == "/content/posts/2020/images/test.jpg"
    assert resolve_target("photo.png", PARENT) == "/content/posts/2020/photo.png"


def test_relative_paths_are_normalized():
    assert resolve_target("../shared/logo.svg", PARENT) == "/content/posts/shared/logo.svg"
    assert resolve_target("a/./b/../c.png", PARENT) == "/content/posts/2020/a/c.png"


def test_parent_path_for_places_file_under_prefix():
    assert parent_path_for("posts/2020/images-test.md") == "/content/posts/2020"
    assert parent_path_for("about.md") == "/content"
    assert parent_path_for("posts/a.md", url_prefix="/static/") == "/static/posts"
