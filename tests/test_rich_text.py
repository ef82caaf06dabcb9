"""Tests for Markdown rendering of rich-text section bodies."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from campus_pages.rich_text import RichTextRenderer


@pytest.fixture
def renderer() -> RichTextRenderer:
    return RichTextRenderer()


def _languages(html: str) -> list[str | None]:
    soup = BeautifulSoup(html, "html.parser")
    return [block.get("data-language") for block in soup.select("div.codehilite")]


def test_fenced_blocks_are_labelled_in_order(renderer: RichTextRenderer) -> None:
    text = (
        "Intro\n\n```python\nprint('hi')\n```\n\n"
        "~~~\nplain\n~~~\n\n```bash\necho ok\n```\n"
    )
    languages = _languages(renderer.render(text))
    assert languages == ["python", "text", "bash"], (
        f"unexpected block languages {languages!r}"
    )


def test_indented_fence_in_list_is_highlighted(renderer: RichTextRenderer) -> None:
    """Fences indented under a list item still render as highlighted code."""
    text = "1. Install:\n\n   ```bash\n   pip install campus-pages\n   ```\n"
    html = renderer.render(text)
    assert _languages(html) == ["bash"], f"expected a bash block in {html!r}"
    assert "pip install" in BeautifulSoup(html, "html.parser").get_text()


def test_fence_lines_inside_a_block_stay_verbatim(renderer: RichTextRenderer) -> None:
    text = "~~~~markdown\n```python\nx = 1\n```\n~~~~\n"
    html = renderer.render(text)
    soup = BeautifulSoup(html, "html.parser")
    assert _languages(html) == ["markdown"]
    assert "```python" in soup.get_text(), "expected the inner fence kept as text"


def test_renderer_is_reusable(renderer: RichTextRenderer) -> None:
    """Consecutive renders do not leak state between documents."""
    first = renderer.render("# Title\n\nBody")
    second = renderer.render("Plain *text*")
    assert "Title" not in second, "expected a fresh conversion per call"
    assert "<em>text</em>" in second
    assert "Title" in first


@pytest.mark.parametrize("content", [None, "", "   \n"])
def test_empty_content_renders_nothing(
    renderer: RichTextRenderer, content: str | None
) -> None:
    assert renderer.render(content) == ""


def test_stylesheet_targets_highlighted_blocks(renderer: RichTextRenderer) -> None:
    assert ".codehilite" in renderer.stylesheet
