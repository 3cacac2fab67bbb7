"""YAML front matter and local article path helpers."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", re.MULTILINE | re.DOTALL
)
_TITLE_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9-]")
_SLUG_DASHES_RE = re.compile(r"-+")


class FrontMatterError(Exception):
    """Raised when an article's front matter cannot be parsed."""


def parse_markdown(text: str) -> Tuple[Dict[str, Any], str]:
    """Split ``text`` into its front matter mapping and Markdown body."""

    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid front matter: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError("Front matter must be a mapping.")
    return data, text[match.end():]


def stringify_markdown(
    front_matter: Optional[Mapping[str, Any]], body: str
) -> str:
    """Join front matter and body back into a single Markdown document."""

    content = body if body.endswith("\n") else body + "\n"
    if not front_matter:
        return content
    header = yaml.safe_dump(
        dict(front_matter),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{header}---\n{content}"


def extract_title(body: str) -> Optional[str]:
    """Return the text of the first level-one heading, if any."""

    match = _TITLE_RE.search(body)
    return match.group(1).strip() if match else None


def generate_file_path(locale: str, collection_id: str, slug: str) -> str:
    """Return ``locale/collection/slug.md`` with a filesystem-safe slug."""

    sanitized = _SLUG_INVALID_RE.sub("-", slug.lower())
    sanitized = _SLUG_DASHES_RE.sub("-", sanitized).strip("-")
    return f"{locale}/{collection_id}/{sanitized}.md"


def timestamp_to_iso(timestamp: float) -> str:
    """Convert a Unix timestamp in seconds to an ISO-8601 UTC string."""

    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = [
    "FrontMatterError",
    "extract_title",
    "generate_file_path",
    "parse_markdown",
    "stringify_markdown",
    "timestamp_to_iso",
]
