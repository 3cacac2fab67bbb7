"""High-level orchestration for converting article files on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from .checksum import write_if_changed
from .formats.html import markdown_to_html
from .formats.markdown import html_to_markdown
from .front_matter import parse_markdown, stringify_markdown
from .models import ConversionSummary


def _report(kind: str, path: Path, changed: bool) -> None:
    if changed:
        print(f"✅ {kind} written: {path}")
    else:
        print(f"⏭️ {kind} unchanged: {path}")


def convert_html_file(
    *,
    html_path: Path | str,
    markdown_path: Path | str,
    front_matter: Optional[Mapping[str, Any]] = None,
) -> ConversionSummary:
    """Decode an article body file into a Markdown document.

    The Markdown file is only rewritten when its content changes, so a
    re-pull that differs only in asset signatures leaves it untouched.
    """

    html_path = Path(html_path)
    markdown_path = Path(markdown_path)
    if not html_path.exists():
        raise FileNotFoundError(f"Article HTML not found: {html_path}")

    body = html_to_markdown(html_path.read_text(encoding="utf-8"))
    payload = stringify_markdown(front_matter, body)
    changed = write_if_changed(markdown_path, payload)
    _report("Markdown", markdown_path, changed)

    return ConversionSummary(
        source_path=html_path,
        output_path=markdown_path,
        payload=payload,
        changed=changed,
        front_matter=dict(front_matter or {}),
    )


def convert_markdown_file(
    *,
    markdown_path: Path | str,
    html_path: Path | str,
    original_html_path: Path | str | None = None,
) -> ConversionSummary:
    """Encode a Markdown document back into an article body file.

    ``original_html_path`` points at the last fetched body of the same
    article; signed asset URLs found there are restored in the output.
    """

    markdown_path = Path(markdown_path)
    html_path = Path(html_path)
    if not markdown_path.exists():
        raise FileNotFoundError(f"Article Markdown not found: {markdown_path}")

    front_matter, body = parse_markdown(
        markdown_path.read_text(encoding="utf-8")
    )

    original_html: Optional[str] = None
    if original_html_path is not None:
        original_path = Path(original_html_path)
        if original_path.exists():
            original_html = original_path.read_text(encoding="utf-8")
        else:
            print(
                "⚠️ Original HTML not found; asset signatures will not be"
                f" restored: {original_path}"
            )

    payload = markdown_to_html(body, original_html)
    changed = write_if_changed(html_path, payload)
    _report("HTML", html_path, changed)

    return ConversionSummary(
        source_path=markdown_path,
        output_path=html_path,
        payload=payload,
        changed=changed,
        front_matter=front_matter,
    )


__all__ = ["convert_html_file", "convert_markdown_file"]
