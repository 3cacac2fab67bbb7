"""Bidirectional codec between help-center article HTML and Markdown."""

from .formats.html import markdown_to_html
from .formats.markdown import html_to_markdown
from .models import CalloutStyle, ConversionSummary
from .pipeline import convert_html_file, convert_markdown_file
from .signatures import (
    SignatureIndex,
    build_signature_index,
    restore_signatures,
    strip_signatures,
)
from .styles import CALLOUT_COLORS, CALLOUT_STYLES

__all__ = [
    "CALLOUT_COLORS",
    "CALLOUT_STYLES",
    "CalloutStyle",
    "ConversionSummary",
    "SignatureIndex",
    "build_signature_index",
    "convert_html_file",
    "convert_markdown_file",
    "html_to_markdown",
    "markdown_to_html",
    "restore_signatures",
    "strip_signatures",
]
