"""Decode help-center article HTML into the Markdown dialect.

The decoder is a fixed sequence of substitution passes over the whole
body. Each pass only rewrites the constructs it recognises; anything else
survives untouched into the output, where it remains valid Markdown as
embedded HTML. Pass order matters because several patterns overlap
(tables before paragraphs, links before tag stripping, bold before
italic).
"""

from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .. import inline
from ..inline import Placeholders
from ..passthrough import replace_balanced, stash_opaque_nodes
from ..signatures import strip_signatures
from ..styles import color_for_background

SOFT_BREAK_MARK = "\ue002"

_FLAGS = re.IGNORECASE | re.DOTALL

_TABLE_RE = re.compile(
    r"<div\s+class=\"intercom-interblocks-table-container\"[^>]*>\s*"
    r"(<table\b.*?</table\s*>)\s*</div\s*>",
    _FLAGS,
)
_CALLOUT_OPEN_RE = re.compile(
    r"<(?P<tag>div)\s[^>]*?class=\"[^\"]*intercom-interblocks-callout"
    r"[^\"]*\"[^>]*>",
    re.IGNORECASE,
)
_BACKGROUND_RE = re.compile(r"background-color\s*:\s*([^;\"']+)", re.I)
_CODE_BLOCK_RE = re.compile(
    r"<pre(?:\s[^>]*)?>\s*<code(?:\s[^>]*)?>(.*?)</code\s*>\s*</pre\s*>",
    _FLAGS,
)

_ALIGNED_IMAGE_RE = re.compile(
    r"<div\s+class=\"intercom-container\s+intercom-align-center\"[^>]*>"
    r"\s*(<img\b[^>]*>)\s*</div\s*>",
    _FLAGS,
)
_IMAGE_CONTAINER_RE = re.compile(
    r"<div\s+class=\"intercom-container\"[^>]*>\s*(<img\b[^>]*>)\s*"
    r"</div\s*>",
    _FLAGS,
)
_IMAGE_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_HR_RE = re.compile(r"<hr(?:\s[^>]*)?/?>", re.IGNORECASE)

_HEADING_RES = tuple(
    (
        level,
        re.compile(
            rf"<h{level}\s[^>]*?class=\"[^\"]*"
            rf"intercom-align-(center|right|justify)[^\"]*\"[^>]*>"
            rf"(.*?)</h{level}\s*>",
            _FLAGS,
        ),
        re.compile(rf"<h{level}(?:\s[^>]*)?>(.*?)</h{level}\s*>", _FLAGS),
    )
    for level in range(1, 5)
)

_LIST_OPEN_RE = re.compile(r"<(?P<tag>ul|ol)(?:\s[^>]*)?>", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"<li(?:\s[^>]*)?>", re.IGNORECASE)
_LIST_TAG_RE = re.compile(r"</?(?:ul|ol|li)(?:\s[^>]*)?>", re.IGNORECASE)

_LINK_RE = re.compile(
    r"<a\s(?:[^>]*?\s)?href=\"([^\"]*)\"[^>]*>(.*?)</a\s*>", _FLAGS
)

_ALIGNED_PARAGRAPH_RE = re.compile(
    r"<p\s[^>]*?class=\"[^\"]*intercom-align-(center|right|justify)"
    r"[^\"]*\"[^>]*>(.*?)</p\s*>",
    _FLAGS,
)
_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>(.*?)</p\s*>", _FLAGS)

_BR_RE = re.compile(r"<br(?:\s[^>]*)?/?>", re.IGNORECASE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_SOFT_BREAK_RE = re.compile(SOFT_BREAK_MARK + r"\n(?=[^\n])")


def html_to_markdown(html: Optional[str]) -> str:
    """Convert an article body from the HTML dialect into Markdown.

    Never raises; unrecognised markup is carried through verbatim.
    """

    if not html:
        return ""

    stash = Placeholders()
    result = inline.escape_sentinels(html.replace("\r\n", "\n"))

    result = strip_signatures(result)
    result = stash_opaque_nodes(result, stash, _block)
    result = _TABLE_RE.sub(lambda match: _convert_table(match, stash), result)
    result = replace_balanced(result, _CALLOUT_OPEN_RE, _convert_callout)
    result = _CODE_BLOCK_RE.sub(
        lambda match: _convert_code_block(match, stash), result
    )
    result = _convert_images(result)
    result = _HR_RE.sub("\n\n---\n\n", result)
    result = _convert_headings(result)
    result = replace_balanced(result, _LIST_OPEN_RE, _convert_list)
    result = _convert_links(result)
    result = _convert_paragraphs(result)
    result = inline.html_inline_to_markdown(result)
    result = _BR_RE.sub(SOFT_BREAK_MARK + "\n", result)
    result = _cleanup_whitespace(result)

    return inline.unescape_sentinels(stash.restore(result).strip())


def _block(text: str) -> str:
    return f"\n\n{text}\n\n"


def _table_cell(content: str) -> str:
    text = inline.unwrap_paragraphs(content, " ")
    text = _BR_RE.sub("<br>", text)
    text = inline.html_inline_to_markdown(text)
    text = _convert_links(text)
    return inline.fold_whitespace(text).replace("|", "\\|")


def _table_line(cells: List[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def _convert_table(match: re.Match[str], stash: Placeholders) -> str:
    try:
        soup = BeautifulSoup(match.group(1), "lxml")
    except ParserRejectedMarkup:
        return match.group(0)

    rows: List[List[str]] = []
    for row in soup.find_all("tr"):
        cells = [
            _table_cell(cell.decode_contents())
            for cell in row.find_all(["td", "th"], recursive=False)
        ]
        if cells:
            rows.append(cells)

    if not rows:
        return match.group(0)

    width = max(len(row) for row in rows)
    padded = [row + [""] * (width - len(row)) for row in rows]
    lines = [_table_line(padded[0]), _table_line(["---"] * width)]
    lines.extend(_table_line(row) for row in padded[1:])
    return _block(stash.put("\n".join(lines)))


def _convert_callout(match: re.Match[str], content: str, _whole: str) -> str:
    style = inline.tag_attribute(match.group(0), "style") or ""
    background = _BACKGROUND_RE.search(style)
    color = color_for_background(background.group(1) if background else None)

    body = inline.unwrap_paragraphs(content, "\n")
    body = inline.html_inline_to_markdown(body)
    lines = [line.strip() for line in body.strip().split("\n")]
    body = "\n".join(line for line in lines if line)
    return _block(f"```callout-{color}\n{body}\n```")


def _convert_code_block(match: re.Match[str], stash: Placeholders) -> str:
    code = inline.unescape_entities(match.group(1)).strip("\n")
    fence = "```\n" + code + "\n```"
    return _block(stash.put(fence))


def _image_reference(tag: str) -> str:
    src = inline.tag_attribute(tag, "src") or ""
    alt = inline.tag_attribute(tag, "alt") or ""
    return f"![{alt}]({src})"


def _convert_images(html: str) -> str:
    html = _ALIGNED_IMAGE_RE.sub(
        lambda match: _block(
            "<!-- align:center -->" + _image_reference(match.group(1))
        ),
        html,
    )
    html = _IMAGE_CONTAINER_RE.sub(
        lambda match: _block(_image_reference(match.group(1))), html
    )
    return _IMAGE_RE.sub(lambda match: _image_reference(match.group(0)), html)


def _heading(level: int, content: str, align: Optional[str] = None) -> str:
    text = inline.fold_whitespace(inline.strip_tags(content))
    if not text:
        return "\n\n"
    directive = f"<!-- align:{align.lower()} -->" if align else ""
    return _block(f"{directive}{'#' * level} {text}")


def _convert_headings(html: str) -> str:
    for level, aligned_re, plain_re in _HEADING_RES:
        html = aligned_re.sub(
            lambda match, level=level: _heading(
                level, match.group(2), match.group(1)
            ),
            html,
        )
        html = plain_re.sub(
            lambda match, level=level: _heading(level, match.group(1)), html
        )
    return html


def _list_items(content: str) -> List[str]:
    items: List[str] = []
    for segment in _LIST_ITEM_RE.split(content)[1:]:
        text = _LIST_TAG_RE.sub("", segment)
        text = inline.unwrap_paragraphs(text, " ")
        text = inline.fold_whitespace(inline.html_inline_to_markdown(text))
        if text:
            items.append(text)
    return items


def _convert_list(match: re.Match[str], content: str, _whole: str) -> str:
    items = _list_items(content)
    if match.group("tag").lower() == "ol":
        lines = [f"{number}. {item}" for number, item in enumerate(items, 1)]
    else:
        lines = [f"- {item}" for item in items]
    return _block("\n".join(lines))


def _convert_links(html: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        label = inline.html_inline_to_markdown(match.group(2))
        label = inline.fold_whitespace(inline.strip_tags(label))
        return f"[{label}]({match.group(1)})"

    return _LINK_RE.sub(_replace, html)


def _paragraph(content: str, prefix: str = "") -> str:
    text = content.strip()
    if not text:
        return "\n"
    return _block(prefix + text)


def _convert_paragraphs(html: str) -> str:
    html = _ALIGNED_PARAGRAPH_RE.sub(
        lambda match: _paragraph(
            match.group(2), f"<!-- align:{match.group(1).lower()} -->"
        ),
        html,
    )
    # no-margin and bare paragraphs render the same way
    return _PARAGRAPH_RE.sub(lambda match: _paragraph(match.group(1)), html)


def _cleanup_whitespace(text: str) -> str:
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    text = _BLANK_RUN_RE.sub("\n\n", text)
    text = _SOFT_BREAK_RE.sub("  \n", text)
    return text.replace(SOFT_BREAK_MARK, "").strip()


__all__ = ["SOFT_BREAK_MARK", "html_to_markdown"]
