"""Command-line wrapper around the article codec file pipeline."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from article_codec import (
    ConversionSummary,
    convert_html_file,
    convert_markdown_file,
)
from article_codec.front_matter import FrontMatterError, generate_file_path
from config_loader import ConfigError, resolve_runtime_paths

UNCATEGORIZED_COLLECTION = "uncategorized"


@dataclass(slots=True)
class ConversionOptions:
    """Article metadata and overrides used when decoding a body file."""

    output: Optional[str] = None
    config_path: Optional[str] = None
    locale: Optional[str] = None
    article_id: Optional[str] = None
    collection_id: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None


def _front_matter(
    options: ConversionOptions, locale: Optional[str]
) -> Dict[str, Any]:
    fields = {
        "intercom_id": options.article_id,
        "intercom_collection_id": options.collection_id,
        "locale": locale,
        "title": options.title,
    }
    return {key: value for key, value in fields.items() if value}


def _markdown_destination(
    input_html: Path, options: ConversionOptions
) -> tuple[Path, Optional[str]]:
    """Return the Markdown output path and the locale it belongs to."""

    if options.output:
        return Path(options.output), options.locale

    runtime = resolve_runtime_paths(
        config_path=options.config_path, locale=options.locale
    )
    relative = generate_file_path(
        runtime["locale"],
        options.collection_id or UNCATEGORIZED_COLLECTION,
        options.slug or input_html.stem,
    )
    return Path(runtime["articles_dir"]) / relative, runtime["locale"]


def html_to_markdown_file(
    input_html: str, *, options: ConversionOptions | None = None
) -> ConversionSummary:
    """Decode ``input_html`` into a Markdown article with front matter."""

    resolved = options or ConversionOptions()
    html_path = Path(input_html)
    markdown_path, locale = _markdown_destination(html_path, resolved)
    return convert_html_file(
        html_path=html_path,
        markdown_path=markdown_path,
        front_matter=_front_matter(resolved, locale),
    )


def markdown_to_html_file(
    input_markdown: str,
    *,
    output: Optional[str] = None,
    original_html: Optional[str] = None,
) -> ConversionSummary:
    """Encode ``input_markdown`` into an article body file."""

    markdown_path = Path(input_markdown)
    html_path = Path(output) if output else markdown_path.with_suffix(".html")
    return convert_markdown_file(
        markdown_path=markdown_path,
        html_path=html_path,
        original_html_path=original_html,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return CLI arguments for the article conversion tool."""

    parser = argparse.ArgumentParser(
        description="Convert help-center article bodies to and from Markdown.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    to_markdown = subparsers.add_parser(
        "to-markdown", help="Decode an article HTML body into Markdown."
    )
    to_markdown.add_argument("input_html", help="Article body HTML file.")
    to_markdown.add_argument(
        "--output",
        help="Markdown destination (defaults to a path under articles_dir).",
    )
    to_markdown.add_argument(
        "--config",
        help="Path to the JSON config (defaults to .intercom-config.json).",
    )
    to_markdown.add_argument(
        "--locale", help="Article locale (defaults to default_locale)."
    )
    to_markdown.add_argument("--article-id", help="Remote article id.")
    to_markdown.add_argument("--collection-id", help="Remote collection id.")
    to_markdown.add_argument("--title", help="Article title.")
    to_markdown.add_argument(
        "--slug", help="File name slug (defaults to the input file stem)."
    )

    to_html = subparsers.add_parser(
        "to-html", help="Encode a Markdown article back into HTML."
    )
    to_html.add_argument("input_markdown", help="Markdown article file.")
    to_html.add_argument(
        "--original-html",
        help="Last fetched body of the article, used to restore signed URLs.",
    )
    to_html.add_argument(
        "--output", help="HTML destination (defaults to INPUT with .html)."
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``article-codec`` CLI."""

    args = parse_args(argv)

    try:
        if args.command == "to-markdown":
            if not Path(args.input_html).exists():
                raise SystemExit(f"Input HTML not found: {args.input_html}")
            options = ConversionOptions(
                output=args.output,
                config_path=args.config,
                locale=args.locale,
                article_id=args.article_id,
                collection_id=args.collection_id,
                title=args.title,
                slug=args.slug,
            )
            html_to_markdown_file(args.input_html, options=options)
        else:
            if not Path(args.input_markdown).exists():
                raise SystemExit(
                    f"Input Markdown not found: {args.input_markdown}"
                )
            markdown_to_html_file(
                args.input_markdown,
                output=args.output,
                original_html=args.original_html,
            )
    except (ConfigError, FrontMatterError) as exc:
        raise SystemExit(str(exc)) from exc


__all__ = [
    "ConversionOptions",
    "html_to_markdown_file",
    "markdown_to_html_file",
]


if __name__ == "__main__":
    main()
