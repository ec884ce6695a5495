from datetime import datetime
from pathlib import Path

from folio.build import DEFAULT_CONFIG
from folio.content import Document
from folio.publisher import Publisher
from folio.renderers import Heading, render
from folio.templates import TemplateEngine, render_toc


def make_rendered(slug="nothing", layout="post", body="# Nothing\n\n## nil\n"):
    document = Document(
        slug=slug,
        title=slug.title(),
        date=datetime(2015, 11, 14),
        layout=layout,
        body=body,
        path=Path(f"{slug}.md"),
        frontmatter={"subtitle": "about nil"},
    )
    return render(document)


def test_render_toc_nesting():
    headings = [
        Heading(id="a", text="A", level=1),
        Heading(id="b", text="B &amp; <code>nil</code>", level=2),
        Heading(id="c", text="C", level=2),
        Heading(id="d", text="D", level=1),
    ]
    html = str(render_toc(headings))
    assert html == (
        '<ul><li><a href="#a">A</a>'
        '<ul><li><a href="#b">B &amp; nil</a></li><li><a href="#c">C</a></li></ul>'
        '</li><li><a href="#d">D</a></li></ul>'
    )
    assert str(render_toc([])) == ""


def test_render_toc_from_rendered_headings():
    rendered = make_rendered(body="## Tom & Jerry\n\n## Sending `nil`\n")
    html = str(render_toc(rendered.toc))
    assert ">Tom &amp; Jerry<" in html
    assert ">Sending nil<" in html
    assert "&amp;amp;" not in html
    assert "&lt;code&gt;" not in html


def test_source_layouts_override_builtin(tmp_path):
    layouts = tmp_path / "_layouts"
    layouts.mkdir()
    (layouts / "post.html.jinja").write_text(
        "<article data-sub=\"{{ frontmatter.subtitle }}\">{{ content }}</article>{{ toc }}",
        encoding="utf-8",
    )
    (layouts / "talk.html").write_text("TALK {{ page.title }}", encoding="utf-8")
    config = DEFAULT_CONFIG.copy()
    site = Publisher(config, source_dir=tmp_path).publish(
        [make_rendered("nothing"), make_rendered("slides", layout="talk")]
    )
    units = {unit.path: unit.content for unit in site.units}
    post = units["2015/11/14/nothing/index.html"]
    assert post.startswith('<article data-sub="about nil"><h1 id="nothing">Nothing</h1>')
    assert '<a href="#nil">nil</a>' in post
    assert units["2015/11/14/slides/index.html"] == "TALK Slides"


def test_unknown_layout_falls_back_to_default():
    engine = TemplateEngine(None, DEFAULT_CONFIG.copy())
    template = engine.resolve_layout("missing")
    assert template.name == "default.html.jinja"


def test_url_for_and_pygments_css():
    config = DEFAULT_CONFIG.copy()
    engine = TemplateEngine(None, config)
    assert engine._url_for("/2015/") == "/2015/"
    assert engine._url_for("about/") == "/about/"
    assert engine._url_for("https://swift.org") == "https://swift.org"
    assert engine._pygments_css() == ""

    config.update(baseurl="/blog", highlight=True)
    engine = TemplateEngine(None, config)
    assert engine._url_for("/2015/") == "/blog/2015/"
    assert ".highlight" in engine._pygments_css()
