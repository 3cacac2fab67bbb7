"""Inline formatting and small text helpers shared by both directions."""

from __future__ import annotations

import re
from html import escape, unescape
from typing import Callable, List, Optional

_TOKEN_OPEN = "\ue000"
_TOKEN_CLOSE = "\ue001"
_ANY_TOKEN_RE = re.compile(f"{_TOKEN_OPEN}[a-z](\\d+){_TOKEN_CLOSE}")
_SENTINEL_RE = re.compile("[\ue000-\ue002]")
_ESCAPED_SENTINEL_RE = re.compile(
    f"{_TOKEN_OPEN}x(e00[0-2]){_TOKEN_CLOSE}"
)

_BOLD_TAG_RE = re.compile(
    r"<(b|strong)(?:\s[^>]*)?>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL
)
_ITALIC_TAG_RE = re.compile(
    r"<(i|em)(?:\s[^>]*)?>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL
)
_CODE_TAG_RE = re.compile(
    r"<code(?:\s[^>]*)?>(.*?)</code\s*>", re.IGNORECASE | re.DOTALL
)
_PARAGRAPH_RE = re.compile(
    r"<p(?:\s[^>]*)?>(.*?)</p\s*>", re.IGNORECASE | re.DOTALL
)
_ANY_TAG_RE = re.compile(r"<[^>]*>")

_CODE_SPAN_RE = re.compile(r"`([^`\n]+)`")
_HTML_TAG_RE = re.compile(r"<[^<>\n]+>")
_BOLD_ITALIC_RE = re.compile(r"\*\*\*(?=\S)(.+?)(?<=\S)\*\*\*")
_BOLD_RE = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
_ITALIC_RE = re.compile(r"\*(?=\S)(.+?)(?<=\S)\*")


class Placeholders:
    """Per-call stash that hides finished fragments from later passes.

    Tokens carry a one-letter ``kind`` so stashes used at the same time
    never resolve each other's tokens.
    """

    def __init__(self, kind: str = "b") -> None:
        self._kind = kind
        self._fragments: List[str] = []
        self._token_re = re.compile(
            f"{_TOKEN_OPEN}{re.escape(kind)}(\\d+){_TOKEN_CLOSE}"
        )

    def put(self, fragment: str) -> str:
        self._fragments.append(fragment)
        index = len(self._fragments) - 1
        return f"{_TOKEN_OPEN}{self._kind}{index}{_TOKEN_CLOSE}"

    def restore(self, text: str) -> str:
        """Put fragments back, including fragments stashed inside others."""

        def _replace(match: re.Match[str]) -> str:
            index = int(match.group(1))
            if index < len(self._fragments):
                return self._fragments[index]
            return match.group(0)

        # a fragment can only nest tokens stashed before it
        for _ in range(len(self._fragments) + 1):
            restored = self._token_re.sub(_replace, text)
            if restored == text:
                break
            text = restored
        return text

    @staticmethod
    def is_token(text: str) -> bool:
        return _ANY_TOKEN_RE.fullmatch(text.strip()) is not None

    def __len__(self) -> int:
        return len(self._fragments)


def _emphasis(marker: str) -> Callable[[re.Match[str]], str]:
    """Wrap the matched inner text in ``marker``, keeping edge spaces out."""

    def _replace(match: re.Match[str]) -> str:
        inner = match.group(2)
        stripped = inner.strip()
        if not stripped:
            return inner
        lead = inner[: len(inner) - len(inner.lstrip())]
        trail = inner[len(inner.rstrip()):]
        return f"{lead}{marker}{stripped}{marker}{trail}"

    return _replace


def _code_span(match: re.Match[str]) -> str:
    inner = match.group(1)
    if not inner.strip():
        return inner
    return f"`{inner}`"


def html_inline_to_markdown(fragment: str) -> str:
    """Convert ``<b>``/``<i>``/``<code>`` runs into Markdown markers.

    Bold runs first, so ``<b><i>x</i></b>`` collapses into ``***x***``.
    """

    fragment = _BOLD_TAG_RE.sub(_emphasis("**"), fragment)
    fragment = _ITALIC_TAG_RE.sub(_emphasis("*"), fragment)
    return _CODE_TAG_RE.sub(_code_span, fragment)


def markdown_inline_to_html(text: str) -> str:
    """Convert emphasis markers and code spans into HTML tag pairs.

    Code spans and existing tags are shielded first so attribute values
    and code text are never rewritten.
    """

    shielded = Placeholders("i")
    text = _CODE_SPAN_RE.sub(
        lambda match: shielded.put(f"<code>{match.group(1)}</code>"), text
    )
    text = _HTML_TAG_RE.sub(lambda match: shielded.put(match.group(0)), text)
    text = _BOLD_ITALIC_RE.sub(r"<b><i>\1</i></b>", text)
    text = _BOLD_RE.sub(r"<b>\1</b>", text)
    text = _ITALIC_RE.sub(r"<i>\1</i>", text)
    return shielded.restore(text)


def unwrap_paragraphs(fragment: str, separator: str = "") -> str:
    return _PARAGRAPH_RE.sub(
        lambda match: match.group(1) + separator, fragment
    )


def strip_tags(fragment: str) -> str:
    return _ANY_TAG_RE.sub("", fragment)


def fold_whitespace(text: str) -> str:
    return " ".join(text.split())


def tag_attribute(tag: str, name: str) -> Optional[str]:
    """Return the raw value of attribute ``name`` in an opening tag."""

    match = re.search(
        rf"(?<![\w-]){re.escape(name)}\s*=\s*"
        r"(?:\"([^\"]*)\"|'([^']*)'|([^\s\"'>]+))",
        tag,
        re.IGNORECASE,
    )
    if match is None:
        return None
    return next(group for group in match.groups() if group is not None)


def escape_entities(text: str) -> str:
    """Escape ``& < > "`` for text placed inside a code container."""

    return escape(text, quote=False).replace('"', "&quot;")


def unescape_entities(text: str) -> str:
    return unescape(text)


def escape_sentinels(text: str) -> str:
    """Hide private-use characters the converters use as internal markers.

    Runs on input before any pass so literal marker characters can never
    be taken for a stash token or a soft break.
    """

    return _SENTINEL_RE.sub(
        lambda match: f"{_TOKEN_OPEN}x{ord(match.group(0)):x}{_TOKEN_CLOSE}",
        text,
    )


def unescape_sentinels(text: str) -> str:
    return _ESCAPED_SENTINEL_RE.sub(
        lambda match: chr(int(match.group(1), 16)), text
    )


__all__ = [
    "Placeholders",
    "escape_entities",
    "escape_sentinels",
    "fold_whitespace",
    "html_inline_to_markdown",
    "markdown_inline_to_html",
    "strip_tags",
    "tag_attribute",
    "unescape_entities",
    "unescape_sentinels",
    "unwrap_paragraphs",
]
