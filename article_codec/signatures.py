"""Signed asset URL handling.

Help-center asset URLs are served from a CDN with short-lived signature
query parameters (``expires``, ``signature``, ``req``). Those parameters
change on every fetch, so they are stripped before an article body is
turned into Markdown and put back when the body is sent upstream again.

The canonical key of an asset URL is its scheme, host and path plus the
remaining non-signature query pairs in sorted order. A
:class:`SignatureIndex` maps canonical keys to the last fully signed URL
seen in a given HTML body; it is rebuilt for every conversion and never
cached.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import unquote, urlsplit

SIGNATURE_PARAMS = frozenset({"expires", "signature", "req"})

ASSET_URL_RE = re.compile(
    r"https?://(?:[a-z0-9-]+\.)*"
    r"(?:intercomcdn\.com|intercom-attachments(?:-\d+)?\.com)"
    r"(?![a-z0-9.-])(?::\d+)?(?:[/?#][^\s\"'<>()]*)?",
    re.IGNORECASE,
)

_PAIR_SPLIT_RE = re.compile(r"&amp;|&")


def _split_url(url: str) -> tuple[str, Optional[str], str]:
    """Split ``url`` into (base, query or None, fragment incl. ``#``)."""

    base, hash_mark, fragment = url.partition("#")
    base, question_mark, query = base.partition("?")
    return base, (query if question_mark else None), hash_mark + fragment


def _query_pairs(query: str) -> List[str]:
    return [pair for pair in _PAIR_SPLIT_RE.split(query) if pair]


def _param_name(pair: str) -> str:
    return unquote(pair.partition("=")[0]).strip().lower()


def _is_signature_pair(pair: str) -> bool:
    return _param_name(pair) in SIGNATURE_PARAMS


def has_signature(url: str) -> bool:
    """Return True when ``url`` carries at least one signature parameter."""

    _, query, _ = _split_url(url)
    if query is None:
        return False
    return any(_is_signature_pair(pair) for pair in _query_pairs(query))


def canonical_key(url: str) -> Optional[str]:
    """Return the signature-free lookup key for ``url``.

    ``None`` is returned for URLs that cannot be parsed.
    """

    try:
        parts = urlsplit(url.replace("&amp;", "&"))
        _ = parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None

    pairs = sorted(
        pair
        for pair in _query_pairs(parts.query)
        if not _is_signature_pair(pair)
    )
    key = f"{parts.scheme.lower()}://{parts.netloc.lower()}{parts.path}"
    if pairs:
        key += "?" + "&".join(pairs)
    return key


def strip_url(url: str) -> str:
    """Remove signature parameters from a single asset URL."""

    if canonical_key(url) is None:
        return url
    base, query, fragment = _split_url(url)
    if query is None:
        return url

    pairs = _query_pairs(query)
    kept = [pair for pair in pairs if not _is_signature_pair(pair)]
    if len(kept) == len(pairs):
        return url

    separator = "&amp;" if "&amp;" in query else "&"
    stripped = base
    if kept:
        stripped += "?" + separator.join(kept)
    return stripped + fragment


def strip_signatures(html: str) -> str:
    """Strip signature parameters from every asset URL in ``html``."""

    if not html:
        return html or ""
    return ASSET_URL_RE.sub(lambda match: strip_url(match.group(0)), html)


@dataclass(slots=True)
class SignatureIndex:
    """Canonical asset key -> most recently seen fully signed URL."""

    entries: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, original_html: Optional[str]) -> "SignatureIndex":
        """Scan ``original_html`` for signed asset URLs (last one wins)."""

        index = cls()
        for match in ASSET_URL_RE.finditer(original_html or ""):
            url = match.group(0)
            if not has_signature(url):
                continue
            key = canonical_key(url)
            if key is not None:
                index.entries[key] = url
        return index

    def lookup(self, url: str) -> Optional[str]:
        key = canonical_key(url)
        if key is None:
            return None
        return self.entries.get(key)

    def restore(self, html: str) -> str:
        """Swap each indexed asset URL in ``html`` for its signed form."""

        if not html or not self.entries:
            return html or ""

        def _replace(match: re.Match[str]) -> str:
            url = match.group(0)
            return self.lookup(url) or url

        return ASSET_URL_RE.sub(_replace, html)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.lookup(url) is not None


def build_signature_index(original_html: Optional[str]) -> SignatureIndex:
    return SignatureIndex.build(original_html)


def restore_signatures(html: str, index: SignatureIndex) -> str:
    return index.restore(html)


__all__ = [
    "ASSET_URL_RE",
    "SIGNATURE_PARAMS",
    "SignatureIndex",
    "build_signature_index",
    "canonical_key",
    "has_signature",
    "restore_signatures",
    "strip_signatures",
    "strip_url",
]
