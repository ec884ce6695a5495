from pathlib import Path

import pytest

NOTHING_BODY = """Objective-C is forgiving about `nil`. Sending it a message does nothing:

```objc
NSString *name = nil;
NSUInteger length = [name length];   // 0
```

Collections are less forgiving:

```objc
NSMutableDictionary *dict = [NSMutableDictionary dictionary];
dict[@"goodbye!"] = nil;   // crashes, probably
```

Swift makes the absence explicit:

```swift
var name: String? = nil
if let name = name {
\tprint(name)
}
```
"""


def write_post(
    directory: Path,
    filename: str,
    title: str | None = "Untitled",
    date: str | None = None,
    body: str = "Hello.\n",
    extra: str = "",
) -> Path:
    lines = ["---"]
    if title is not None:
        lines.append(f'title: "{title}"')
    if date is not None:
        lines.append(f"date: {date}")
    if extra:
        lines.append(extra.rstrip("\n"))
    lines.append("---")
    path = directory / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
    return path


@pytest.fixture
def blog(tmp_path: Path) -> Path:
    source = tmp_path / "src"
    write_post(
        source / "_posts",
        "2015-11-14-nothing.md",
        title="Nothing",
        date="2015-11-14",
        body=NOTHING_BODY,
        extra="layout: post\ntags: [objc, swift]",
    )
    write_post(
        source / "_posts",
        "2015-11-13-something.md",
        title="Something",
        date="2015-11-13",
        body="# Something\n\nA *short* post with a [link](https://swift.org).\n",
    )
    return source


@pytest.fixture
def make_post():
    return write_post


@pytest.fixture
def nothing_body() -> str:
    return NOTHING_BODY
