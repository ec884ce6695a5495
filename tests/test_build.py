import logging

import pytest

from folio.build import DEFAULT_CONFIG, build_site, load_config
from folio.errors import ConfigError, ParseError, RenderError

CRASH_LINE = 'dict[@"goodbye!"] = nil;   // crashes, probably'


def test_build_site_writes_pages(blog, tmp_path):
    output = tmp_path / "out"
    result = build_site(blog, output)
    assert result.ok
    assert [entry.slug for entry in result.site.index] == ["nothing", "something"]

    page = (output / "2015" / "11" / "14" / "nothing" / "index.html").read_text(encoding="utf-8")
    assert CRASH_LINE in page
    assert "\tprint(name)\n" in page
    index = (output / "index.html").read_text(encoding="utf-8")
    assert index.index("/2015/11/14/nothing/") < index.index("/2015/11/13/something/")
    assert not (output / "feed.xml").exists()


def test_partial_failure_publishes_the_rest(blog, tmp_path, make_post, caplog):
    make_post(blog / "_posts", "2015-11-15-unclosed.md", title="Unclosed", body="```objc\nnil\n")
    make_post(blog / "_posts", "2015-11-16-untitled.md", title=None)
    output = tmp_path / "out"

    with caplog.at_level(logging.WARNING, logger="folio.build"):
        result = build_site(blog, output)

    assert not result.ok
    failures = {f.identifier: f for f in result.failures}
    assert set(failures) == {"unclosed", "untitled"}
    assert isinstance(failures["unclosed"].error, RenderError)
    assert isinstance(failures["untitled"].error, ParseError)
    assert "unclosed code fence" in failures["unclosed"].message
    assert "Skipping unclosed" in caplog.text
    assert "Skipping untitled" in caplog.text

    assert [entry.slug for entry in result.site.index] == ["nothing", "something"]
    assert (output / "2015" / "11" / "14" / "nothing" / "index.html").exists()
    assert not (output / "2015" / "11" / "15").exists()
    assert "unclosed" not in (output / "index.html").read_text(encoding="utf-8")


def test_build_uses_config(blog, tmp_path):
    (blog / "folio.yaml").write_text(
        "title: Optionals\nurl: https://example.com\npermalink: /posts/:slug/\n",
        encoding="utf-8",
    )
    output = tmp_path / "out"
    result = build_site(blog, output)
    assert result.config["title"] == "Optionals"
    assert (output / "posts" / "nothing" / "index.html").exists()
    assert "https://example.com/posts/nothing/" in (output / "feed.xml").read_text(encoding="utf-8")
    assert (output / "sitemap.xml").exists()


def test_build_with_overrides_and_drafts(blog, tmp_path, make_post):
    make_post(blog / "_drafts", "2015-11-20-wip.md", title="Work in progress")
    output = tmp_path / "out"
    result = build_site(
        blog, output, include_drafts=True, config_overrides={"permalink": "/:slug/"}
    )
    assert {entry.slug for entry in result.site.index} == {"nothing", "something", "wip"}
    assert (output / "wip" / "index.html").exists()


def test_build_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_site(tmp_path / "missing", tmp_path / "out")


def test_load_config(tmp_path):
    assert load_config(tmp_path) == DEFAULT_CONFIG
    (tmp_path / "folio.yaml").write_text("title: Optionals\nhighlight: true\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config["title"] == "Optionals"
    assert config["highlight"] is True
    assert config["default_layout"] == "post"

    (tmp_path / "folio.yaml").write_text("- not\n- a mapping\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)

    (tmp_path / "folio.yaml").write_text("title: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_permalink_pattern_fails_build(blog, tmp_path):
    (blog / "folio.yaml").write_text("permalink: /:year/\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        build_site(blog, tmp_path / "out")


def test_bad_documents_do_not_abort_the_build(blog, tmp_path, make_post):
    make_post(blog / "_posts", "2015-11-15-impossible.md", title="Impossible", date="2015-02-30")
    (blog / "_posts" / "2015-11-16-latin1.md").write_bytes(b"---\ntitle: Caf\xe9\n---\nBody.\n")
    result = build_site(blog, tmp_path / "out")
    assert sorted(f.identifier for f in result.failures) == ["impossible", "latin1"]
    assert all(isinstance(f.error, ParseError) for f in result.failures)
    assert [entry.slug for entry in result.site.index] == ["nothing", "something"]


def test_impossible_date_in_config_is_config_error(tmp_path):
    (tmp_path / "folio.yaml").write_text("launched: 2015-02-30\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


@pytest.mark.parametrize("relative", [".", ".."])
def test_output_may_not_contain_source(blog, relative):
    output = blog / relative
    with pytest.raises(ConfigError):
        build_site(blog, output)
    assert (blog / "_posts" / "2015-11-14-nothing.md").exists()


def test_output_inside_source_is_allowed(blog):
    result = build_site(blog, blog / "_site")
    assert result.ok
    assert (blog / "_site" / "index.html").exists()
    assert (blog / "_posts" / "2015-11-14-nothing.md").exists()
