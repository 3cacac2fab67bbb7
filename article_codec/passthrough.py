"""Editor blocks carried verbatim through both conversion directions.

Collapsible sections, embed containers, ``<details>``, iframes, videos and
button anchors have no Markdown form. Both converters park them in a
:class:`Placeholders` stash before any other pass runs, so their markup
comes back byte for byte.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional

from .inline import Placeholders

_FLAGS = re.IGNORECASE | re.DOTALL

_CONTAINER_OPEN_RE = re.compile(
    r"<(?P<tag>div)\s[^>]*?class=\"[^\"]*"
    r"intercom-(?:interblocks-collapsible|embed-container)[^\"]*\"[^>]*>",
    re.IGNORECASE,
)
_DETAILS_OPEN_RE = re.compile(
    r"<(?P<tag>details)(?:\s[^>]*)?>", re.IGNORECASE
)
_OPAQUE_RES = (
    re.compile(r"<iframe\b.*?</iframe\s*>", _FLAGS),
    re.compile(r"<video\b.*?</video\s*>", _FLAGS),
    re.compile(
        r"<a\s[^>]*?class=\"[^\"]*intercom-h2b-button[^\"]*\"[^>]*>"
        r".*?</a\s*>",
        _FLAGS,
    ),
)

Renderer = Callable[[re.Match[str], str, str], str]


def closing_tag_bounds(
    html: str, tag: str, start: int
) -> Optional[tuple[int, int]]:
    """Locate the close tag balancing an element opened before ``start``."""

    pattern = re.compile(rf"<(/?){tag}\b[^>]*>", re.IGNORECASE)
    depth = 1
    for match in pattern.finditer(html, start):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.start(), match.end()
        else:
            depth += 1
    return None


def replace_balanced(
    html: str, open_re: re.Pattern[str], render: Renderer
) -> str:
    """Replace each element opened by ``open_re`` up to its balanced close.

    ``render`` receives the opening match, the inner markup and the whole
    element. Elements without a closing tag are left as they are.
    """

    pieces: List[str] = []
    cursor = 0
    while True:
        match = open_re.search(html, cursor)
        if match is None:
            break
        bounds = closing_tag_bounds(html, match.group("tag"), match.end())
        if bounds is None:
            pieces.append(html[cursor:match.end()])
            cursor = match.end()
            continue
        close_start, close_end = bounds
        pieces.append(html[cursor:match.start()])
        pieces.append(
            render(
                match,
                html[match.end():close_start],
                html[match.start():close_end],
            )
        )
        cursor = close_end
    pieces.append(html[cursor:])
    return "".join(pieces)


def _as_is(token: str) -> str:
    return token


def stash_opaque_nodes(
    text: str,
    stash: Placeholders,
    wrap: Callable[[str], str] = _as_is,
) -> str:
    """Swap every opaque node in ``text`` for a stash token.

    ``wrap`` decides how the token sits in the surrounding text; the
    decoder puts it on a block of its own.
    """

    def _keep(_match: re.Match[str], _inner: str, whole: str) -> str:
        return wrap(stash.put(whole))

    text = replace_balanced(text, _CONTAINER_OPEN_RE, _keep)
    text = replace_balanced(text, _DETAILS_OPEN_RE, _keep)
    for pattern in _OPAQUE_RES:
        text = pattern.sub(lambda match: wrap(stash.put(match.group(0))), text)
    return text


__all__ = [
    "Renderer",
    "closing_tag_bounds",
    "replace_balanced",
    "stash_opaque_nodes",
]
