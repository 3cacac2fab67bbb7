"""Encode the Markdown dialect back into help-center article HTML.

Block structure is established first (fences, tables, headings, images,
rules, lists, paragraphs) and inline formatting is applied afterwards, so
attribute values written by the block passes are never rewritten.
Finished blocks whose contents must not be touched again are parked in a
:class:`Placeholders` stash and restored just before cleanup.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .. import inline
from ..inline import Placeholders
from ..passthrough import stash_opaque_nodes
from ..signatures import SignatureIndex
from ..styles import style_for_color

PARAGRAPH_CLASS = "no-margin"
LINK_CLASS = "intercom-content-link"

_CALLOUT_FENCE_RE = re.compile(
    r"^```callout-([\w-]*)[ \t]*\n(.*?)^```[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
_CODE_FENCE_RE = re.compile(
    r"^```(?!callout-)[\w+#.-]*[ \t]*\n(.*?)^```[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
_BLOCK_HTML_RE = re.compile(
    r"<(?:[!?]|/?(?:address|article|aside|blockquote|details|div|dl|dd|dt"
    r"|figcaption|figure|footer|form|h[1-6]|header|hr|iframe|li|nav|ol|p"
    r"|pre|section|summary|table|tbody|tfoot|thead|td|th|tr|ul|video)\b)",
    re.IGNORECASE,
)

_TABLE_SEPARATOR_RE = re.compile(r"^\|(?:\s*:?-{3,}:?\s*\|)+$")
_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")

_ALIGNED_HEADING_RE = re.compile(
    r"^<!-- align:(center|right|justify) -->(#{1,4}) (.+)$", re.MULTILINE
)
_HEADING_RE = re.compile(r"^(#{1,4}) (.+)$", re.MULTILINE)

_BLOCK_IMAGE_RE = re.compile(
    r"^[ \t]*(<!-- align:center -->)?!\[([^\]]*)\]\(([^)\s]+)\)[ \t]*$",
    re.MULTILINE,
)
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)\)")
_HR_RE = re.compile(r"^[ \t]*---[ \t]*$", re.MULTILINE)

_BULLET_RUN_RE = re.compile(r"(?:^- .+(?:\n|$))+", re.MULTILINE)
_NUMBERED_RUN_RE = re.compile(r"(?:^\d+\. .+(?:\n|$))+", re.MULTILINE)
_NUMBER_PREFIX_RE = re.compile(r"^\d+\.\s")

_ALIGNED_PARAGRAPH_RE = re.compile(
    r"^<!-- align:(center|right|justify) -->(.+)$"
)
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_SOFT_BREAK_RE = re.compile(r" {2,}\n")

_BETWEEN_TAGS_RE = re.compile(r">[ \t]*\n\s*<")
_EMPTY_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>\s*</p>")


def markdown_to_html(
    markdown: Optional[str], original_html: Optional[str] = None
) -> str:
    """Convert Markdown written in the article dialect into HTML.

    When ``original_html`` is given, asset URLs whose canonical form
    appears there are swapped back to their signed originals.
    """

    if not markdown:
        return ""

    stash = Placeholders()
    result = inline.escape_sentinels(markdown.replace("\r\n", "\n"))

    result = _CALLOUT_FENCE_RE.sub(
        lambda match: stash.put(_render_callout(match)), result
    )
    result = _CODE_FENCE_RE.sub(
        lambda match: stash.put(_render_code_block(match)), result
    )
    result = stash_opaque_nodes(result, stash)
    result = _convert_tables(result, stash)
    result = _convert_headings(result)
    result = _convert_images(result)
    result = _HR_RE.sub("<hr>", result)
    result = _convert_lists(result)
    result = _convert_paragraphs(result)
    result = _convert_links(result)
    result = inline.markdown_inline_to_html(result)
    result = _SOFT_BREAK_RE.sub("<br>", result)
    result = _cleanup_html(stash.restore(result))
    result = inline.unescape_sentinels(result)

    if original_html:
        result = SignatureIndex.build(original_html).restore(result)
    return result


def _paragraph(content: str, css_class: str = PARAGRAPH_CLASS) -> str:
    return f'<p class="{css_class}">{content}</p>'


def _image_tag(src: str, alt: str) -> str:
    alt_attr = f' alt="{alt}"' if alt else ""
    return f'<img src="{src}"{alt_attr}>'


def _convert_links(text: str) -> str:
    return _LINK_RE.sub(
        lambda match: (
            f'<a href="{match.group(2)}" target="_blank" '
            f'class="{LINK_CLASS}">{match.group(1)}</a>'
        ),
        text,
    )


def _render_inline(text: str) -> str:
    """Fully render a leaf fragment that is stashed before the main passes."""

    text = _IMAGE_RE.sub(
        lambda match: _image_tag(match.group(2), match.group(1)), text
    )
    text = _convert_links(text)
    return inline.markdown_inline_to_html(text)


def _render_callout(match: re.Match[str]) -> str:
    style = style_for_color(match.group(1))
    body = _SOFT_BREAK_RE.sub("<br>", match.group(2).strip("\n"))
    paragraphs = [
        _paragraph(_render_inline(line.strip()))
        for line in body.split("\n")
        if line.strip()
    ]
    return (
        f'<div class="intercom-interblocks-callout" style="{style.css()}">'
        f"{''.join(paragraphs)}</div>"
    )


def _render_code_block(match: re.Match[str]) -> str:
    code = inline.escape_entities(match.group(1).strip("\n"))
    return f"<pre><code>{code}</code></pre>"


def _starts_block_html(line: str) -> bool:
    return _BLOCK_HTML_RE.match(line.lstrip()) is not None


def _is_table_row(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= 2 and stripped[0] == "|" and stripped[-1] == "|"


def _split_row(line: str) -> List[str]:
    cells = _CELL_SPLIT_RE.split(line.strip()[1:-1])
    return [cell.strip().replace("\\|", "|") for cell in cells]


def _render_table(rows: List[List[str]]) -> str:
    width = max(len(row) for row in rows)
    rendered_rows: List[str] = []
    for row in rows:
        cells = row + [""] * (width - len(row))
        rendered_rows.append(
            "<tr>"
            + "".join(
                f"<td>{_paragraph(_render_inline(cell))}</td>"
                for cell in cells
            )
            + "</tr>"
        )
    return (
        '<div class="intercom-interblocks-table-container">'
        f"<table><tbody>{''.join(rendered_rows)}</tbody></table></div>"
    )


def _convert_tables(text: str, stash: Placeholders) -> str:
    lines = text.split("\n")
    output: List[str] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        has_separator = index + 1 < len(lines) and bool(
            _TABLE_SEPARATOR_RE.match(lines[index + 1].strip())
        )
        if not (_is_table_row(line) and has_separator):
            output.append(line)
            index += 1
            continue

        rows = [_split_row(line)]
        index += 2
        while index < len(lines) and _is_table_row(lines[index]):
            rows.append(_split_row(lines[index]))
            index += 1
        output.append(stash.put(_render_table(rows)))
    return "\n".join(output)


def _convert_headings(text: str) -> str:
    def _heading(hashes: str, content: str, align: Optional[str]) -> str:
        level = len(hashes)
        css = f' class="intercom-align-{align}"' if align else ""
        return f"<h{level}{css}>{content.strip()}</h{level}>"

    text = _ALIGNED_HEADING_RE.sub(
        lambda match: _heading(match.group(2), match.group(3), match.group(1)),
        text,
    )
    return _HEADING_RE.sub(
        lambda match: _heading(match.group(1), match.group(2), None), text
    )


def _convert_images(text: str) -> str:
    def _container(match: re.Match[str]) -> str:
        css = "intercom-container"
        if match.group(1):
            css += " intercom-align-center"
        image = _image_tag(match.group(3), match.group(2))
        return f'<div class="{css}">{image}</div>'

    text = _BLOCK_IMAGE_RE.sub(_container, text)
    return _IMAGE_RE.sub(
        lambda match: _image_tag(match.group(2), match.group(1)), text
    )


def _list_html(tag: str, lines: List[str]) -> str:
    items = "".join(f"<li>{_paragraph(line)}</li>" for line in lines)
    return f"<{tag}>{items}</{tag}>\n"


def _convert_lists(text: str) -> str:
    text = _BULLET_RUN_RE.sub(
        lambda match: _list_html(
            "ul",
            [line[2:].strip() for line in match.group(0).strip().split("\n")],
        ),
        text,
    )
    return _NUMBERED_RUN_RE.sub(
        lambda match: _list_html(
            "ol",
            [
                _NUMBER_PREFIX_RE.sub("", line).strip()
                for line in match.group(0).strip().split("\n")
            ],
        ),
        text,
    )


def _is_plain_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not (
        _starts_block_html(stripped) or Placeholders.is_token(stripped)
    )


def _convert_paragraphs(text: str) -> str:
    """Wrap every remaining text line in its own paragraph.

    A line ending in two spaces continues into the following text line,
    which later becomes a ``<br>``.
    """

    lines = text.split("\n")
    output: List[str] = []
    index = 0
    while index < len(lines):
        line = lines[index].strip()
        if not line:
            index += 1
            continue

        aligned = _ALIGNED_PARAGRAPH_RE.match(line)
        if aligned:
            css_class = f"intercom-align-{aligned.group(1)} {PARAGRAPH_CLASS}"
            content = aligned.group(2)
        elif _starts_block_html(line) or Placeholders.is_token(line):
            output.append(line)
            index += 1
            continue
        else:
            css_class = PARAGRAPH_CLASS
            content = line

        while (
            lines[index].endswith("  ")
            and index + 1 < len(lines)
            and _is_plain_line(lines[index + 1])
        ):
            index += 1
            content += "  \n" + lines[index].strip()
        output.append(_paragraph(content.strip(), css_class))
        index += 1
    return "\n".join(output)


def _cleanup_html(html: str) -> str:
    html = _BETWEEN_TAGS_RE.sub("><", html)
    html = _EMPTY_PARAGRAPH_RE.sub("", html)
    return html.strip()


__all__ = ["LINK_CLASS", "PARAGRAPH_CLASS", "markdown_to_html"]
