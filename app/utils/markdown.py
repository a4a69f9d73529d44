# app/utils/markdown.py
"""
Markdown -> HTML for chapter content.

Rendering is a pure function of (content, RenderOptions): markdown2 turns
the source into HTML, then the tree is rewritten with BeautifulSoup
(links, images, heading anchors) and code blocks are colored with Pygments.
"""
from __future__ import annotations

import html
import re
from dataclasses import asdict, dataclass
from typing import List, Optional, Tuple

import markdown2
from bs4 import BeautifulSoup, Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

from app.core.config import IMAGE_ALT_TEXT

_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_non_word_re = re.compile(r"[^\w]+", re.ASCII)

HEADING_STYLE = "color: #222; font-weight: 400;"
ANCHORED_HEADING_STYLE = "color: #222;"


@dataclass(frozen=True)
class RenderOptions:
    image_alt: str = IMAGE_ALT_TEXT
    breaks: bool = True
    highlight: bool = True
    anchor_levels: Tuple[int, ...] = (2, 4)
    link_target: str = "_blank"
    link_rel: str = "noopener noreferrer"


DEFAULT_OPTIONS = RenderOptions()


@dataclass(frozen=True)
class Section:
    """A level-2 heading of a chapter, used for in-page navigation."""

    text: str
    level: int
    escaped_text: str

    def to_dict(self) -> dict:
        return asdict(self)


def escape_heading(text: str) -> str:
    """'  Why Python? ' -> 'why-python-'"""
    return _non_word_re.sub("-", text.strip().lower())


def _extras(breaks: bool) -> dict:
    extras = {
        "fenced-code-blocks": None,
        # keeps the language hint on <code> so we can pick the lexer ourselves
        "highlightjs-lang": None,
        "tables": None,
        "strike": None,
    }
    if breaks:
        extras["breaks"] = {"on_newline": True}
    return extras


def _render_soup(content: str, breaks: bool) -> BeautifulSoup:
    raw = markdown2.markdown(html.unescape(content or ""), extras=_extras(breaks))
    return BeautifulSoup(str(raw), "html.parser")


def _rewrite_links(soup: BeautifulSoup, options: RenderOptions) -> None:
    for link in soup.find_all("a", href=True):
        link["target"] = options.link_target
        link["rel"] = options.link_rel


def _rewrite_images(soup: BeautifulSoup, options: RenderOptions) -> None:
    for img in soup.find_all("img"):
        src = img.get("src", "")
        img.attrs = {"src": src, "width": "100%", "alt": options.image_alt}


def _rewrite_headings(soup: BeautifulSoup, options: RenderOptions) -> None:
    for heading in soup.find_all(_HEADING_TAGS):
        level = int(heading.name[1])
        if level not in options.anchor_levels:
            heading["style"] = HEADING_STYLE
            continue

        slug = escape_heading(heading.get_text())
        anchor_attrs = {"name": slug, "href": f"#{slug}"}
        if level == 2:
            anchor_attrs = {"class": "section-anchor", **anchor_attrs}
            heading["class"] = "chapter-section"
            heading["style"] = HEADING_STYLE
        else:
            heading["style"] = ANCHORED_HEADING_STYLE
        heading.wrap(soup.new_tag("a", attrs=anchor_attrs))


def _code_language(code: Optional[Tag]) -> Optional[str]:
    if code is None:
        return None
    classes = code.get("class") or []
    for cls in classes:
        if cls.startswith("language-"):
            return cls[len("language-"):]
    return classes[0] if classes else None


def _lexer_for(source: str, lang: Optional[str]):
    if lang:
        try:
            return get_lexer_by_name(lang)
        except ClassNotFound:
            pass
    try:
        return guess_lexer(source)
    except ClassNotFound:
        return TextLexer()


def _highlight_code(soup: BeautifulSoup) -> None:
    formatter = HtmlFormatter(cssclass="codehilite")
    for pre in soup.find_all("pre"):
        if pre.find_parent(class_="codehilite"):
            continue  # markdown2 already colored it
        code = pre.find("code")
        source = (code or pre).get_text()
        lexer = _lexer_for(source, _code_language(code))
        fragment = BeautifulSoup(highlight(source, lexer, formatter), "html.parser")
        pre.replace_with(*list(fragment.contents))


def markdown_to_html(content: str, options: RenderOptions = DEFAULT_OPTIONS) -> str:
    """Render chapter Markdown (HTML entities decoded first) to display HTML."""
    if not content:
        return ""
    soup = _render_soup(content, options.breaks)
    _rewrite_links(soup, options)
    _rewrite_images(soup, options)
    _rewrite_headings(soup, options)
    if options.highlight:
        _highlight_code(soup)
    return str(soup)


def get_sections(content: str) -> List[Section]:
    # Separate pass: only level-2 headings matter here, HTML is thrown away.
    soup = _render_soup(content, breaks=False)
    sections = []
    for heading in soup.find_all("h2"):
        text = heading.get_text().strip()
        sections.append(Section(text=text, level=2, escaped_text=escape_heading(text)))
    return sections


def render_excerpt(text: str) -> str:
    if not text:
        return ""
    return str(markdown2.markdown(html.unescape(text)))
