"""Shared dataclasses for the article codec."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class CalloutStyle:
    """Background/border colour pair rendered on a callout container."""

    background: str
    border: str

    def css(self) -> str:
        """Return the inline ``style`` attribute value for this pair."""

        return (
            f"background-color: {self.background}; "
            f"border-color: {self.border};"
        )


@dataclass(slots=True)
class ConversionSummary:
    """Represents the outcome of a single file conversion."""

    source_path: Path
    output_path: Path
    payload: str
    changed: bool
    front_matter: Dict[str, Any] = field(default_factory=dict)
