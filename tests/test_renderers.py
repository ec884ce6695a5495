import re
from datetime import datetime
from pathlib import Path

import pytest

from folio.content import CodeBlock, ContentStore, Document
from folio.errors import RenderError
from folio.html_utils import escape_code
from folio.renderers import (
    MarkdownRenderer,
    _generate_heading_id,
    _rewrite_image_path,
    render,
    render_code_block,
)


def make_document(body: str, slug: str = "nothing") -> Document:
    return Document(
        slug=slug,
        title="Nothing",
        date=datetime(2015, 11, 14),
        layout="post",
        body=body,
        path=Path(f"{slug}.md"),
    )


def test_code_blocks_survive_load_and_render(blog, nothing_body):
    documents = ContentStore().load(blog)
    nothing = next(d for d in documents if d.slug == "nothing")
    rendered = render(nothing)

    expected = [block.content for block in nothing.segments() if isinstance(block, CodeBlock)]
    assert [block.content for block in rendered.code_blocks] == expected
    assert rendered.code_blocks[1].content == (
        "NSMutableDictionary *dict = [NSMutableDictionary dictionary];\n"
        'dict[@"goodbye!"] = nil;   // crashes, probably\n'
    )
    assert "\tprint(name)\n" in rendered.code_blocks[2].content
    for block in rendered.code_blocks:
        assert escape_code(block.content) in rendered.html


def test_crashing_line_renders_verbatim():
    body = 'Careful:\n\n```objc\ndict[@"goodbye!"] = nil;   // crashes, probably\n```\n'
    html = render(make_document(body)).html
    assert 'dict[@"goodbye!"] = nil;   // crashes, probably' in html
    assert '<pre><code class="language-objc">' in html


def test_code_is_escaped_but_not_reformatted():
    body = "```\n  if (a < b && c > d) {\n\n\treturn;   \n  }\n```\n"
    html = render(make_document(body)).html
    assert (
        "<pre><code>  if (a &lt; b &amp;&amp; c &gt; d) {\n\n\treturn;   \n  }\n</code></pre>"
        in html
    )


def test_markdown_structures_render():
    body = (
        "# Optionals\n\n"
        "An *optional* is **either** a value or [nothing](https://swift.org).\n\n"
        "- `nil` in Objective-C\n"
        "- `Optional.none` in Swift\n\n"
        "## Optionals\n"
    )
    rendered = render(make_document(body))
    assert '<h1 id="optionals">Optionals</h1>' in rendered.html
    assert '<h2 id="optionals-1">Optionals</h2>' in rendered.html
    assert "<em>optional</em>" in rendered.html
    assert "<strong>either</strong>" in rendered.html
    assert '<a href="https://swift.org">nothing</a>' in rendered.html
    assert "<li><code>nil</code> in Objective-C</li>" in rendered.html
    assert [(h.id, h.level) for h in rendered.toc] == [("optionals", 1), ("optionals-1", 2)]


def test_text_around_code_blocks_keeps_its_order():
    body = "Before\n```swift\nlet x: Int? = nil\n```\nAfter\n"
    html = render(make_document(body)).html
    assert "folio-code" not in html
    before = html.index("Before")
    code = html.index("let x: Int? = nil")
    after = html.index("After")
    assert before < code < after


def test_reference_links_span_code_blocks():
    body = "See [the docs][docs].\n\n```\ncode\n```\n\n[docs]: https://developer.apple.com\n"
    html = render(make_document(body)).html
    assert '<a href="https://developer.apple.com">the docs</a>' in html


def test_unclosed_fence_raises_render_error():
    body = "Intro\n\n```objc\nNSString *s = nil;\n"
    with pytest.raises(RenderError) as excinfo:
        MarkdownRenderer().render(make_document(body))
    assert excinfo.value.line == 3


def test_code_nested_in_list_items_renders_verbatim():
    body = (
        "1. Careful:\n"
        "\n"
        "    ```objc\n"
        "    dict[@\"goodbye!\"] = nil;   // crashes, probably\n"
        "    ```\n"
        "\n"
        "2. Done.\n"
    )
    rendered = render(make_document(body))
    assert 'dict[@"goodbye!"] = nil;   // crashes, probably\n' in rendered.html
    assert "&quot;" not in rendered.html
    assert '<code class="language-objc">' in rendered.html
    assert [block.language for block in rendered.code_blocks] == ["objc"]
    assert rendered.html.index("Careful") < rendered.html.index("goodbye") < rendered.html.index("Done")


def test_indented_code_renders_verbatim():
    rendered = render(make_document("Before.\n\n    say(\"hi\") && exit\n\nAfter.\n"))
    assert '<pre><code>say("hi") &amp;&amp; exit' in rendered.html
    assert len(rendered.code_blocks) == 1


def test_images_are_rewritten():
    html = render(make_document("![Logo](logo.png)\n\n![Remote](https://example.com/a.png)\n")).html
    assert 'src="/assets/images/logo.png"' in html
    assert 'src="https://example.com/a.png"' in html
    assert _rewrite_image_path("/static/logo.png") == "/static/logo.png"


def test_pygments_highlighting_is_optional():
    block = CodeBlock(language="objc", content='dict[@"goodbye!"] = nil;\n')
    highlighted = render_code_block(block, use_pygments=True)
    assert 'class="highlight language-objc"' in highlighted
    assert "goodbye" in re.sub(r"<[^>]+>", "", highlighted)

    unknown = CodeBlock(language="not-a-language", content="x\n")
    assert render_code_block(unknown, use_pygments=True) == (
        '<pre><code class="language-not-a-language">x\n</code></pre>\n'
    )
    assert render_code_block(CodeBlock(language="", content="x\n")) == "<pre><code>x\n</code></pre>\n"


def test_generate_heading_id():
    assert _generate_heading_id("Nothing, or nil?") == "nothing-or-nil"
    assert _generate_heading_id("<code>nil</code> messaging") == "nil-messaging"
    assert _generate_heading_id("???") == "section"
