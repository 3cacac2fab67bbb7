"""Helpers for resolving the article codec configuration file."""

import json
import os
from typing import Any, Dict, List, Optional

DEFAULT_CONFIG_NAME = ".intercom-config.json"
CONFIG_ENV_VAR = "ARTICLE_CODEC_CONFIG"
DEFAULT_LOCALE = "en"
PATH_SUFFIXES = ("_html", "_dir", "_path")


class ConfigError(Exception):
    """Raised when runtime configuration cannot be loaded."""


def _config_candidates(path: Optional[str]) -> List[str]:
    """Return the places an article config may live, most specific first.

    An explicit ``--config`` beats ``$ARTICLE_CODEC_CONFIG``, which beats
    ``.intercom-config.json``. Relative names are tried against the working
    directory and then next to this module.
    """
    name = os.path.expanduser(
        path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_NAME
    )
    if os.path.isabs(name):
        return [name]
    roots = (os.getcwd(), os.path.dirname(os.path.abspath(__file__)))
    return [os.path.join(root, name) for root in roots]


def _resolve_config_path(path: Optional[str]) -> str:
    for candidate in _config_candidates(path):
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)
    raise ConfigError(
        "Article config not found; pass --config or set "
        f"{CONFIG_ENV_VAR} (looked for {path or DEFAULT_CONFIG_NAME})"
    )


def _resolve_path(value: str, base_dir: str) -> str:
    """Make an articles_dir style value absolute against ``base_dir``."""
    expanded = os.path.expanduser(value)
    return os.path.abspath(os.path.join(base_dir, expanded))


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the article config and resolve its path-valued keys."""
    config_path = _resolve_config_path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be an object: {config_path}")

    base_dir = os.path.dirname(config_path)
    resolved: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str) and key.endswith(PATH_SUFFIXES):
            resolved[key] = _resolve_path(value, base_dir)
        else:
            resolved[key] = value

    return resolved


def _supported_locales(value: Any, default_locale: str) -> List[str]:
    if value is None:
        return [default_locale]
    if not isinstance(value, list) or not all(
        isinstance(item, str) for item in value
    ):
        raise ConfigError("supported_locales must be a list of strings.")
    return list(value)


def resolve_runtime_paths(
    *,
    config_path: Optional[str] = None,
    articles_dir: Optional[str] = None,
    locale: Optional[str] = None,
) -> Dict[str, Any]:
    """Resolve runtime arguments by combining CLI overrides with config."""
    config = load_config(config_path)

    resolved_articles = articles_dir or config.get("articles_dir")
    default_locale = config.get("default_locale") or DEFAULT_LOCALE
    supported = _supported_locales(
        config.get("supported_locales"), default_locale
    )
    resolved_locale = locale or default_locale

    if not resolved_articles:
        raise ConfigError("Missing articles_dir configuration.")
    if resolved_locale not in supported:
        raise ConfigError(
            f"Locale {resolved_locale!r} is not listed in supported_locales."
        )

    return {
        "articles_dir": _resolve_path(resolved_articles, os.getcwd()),
        "default_locale": default_locale,
        "supported_locales": supported,
        "locale": resolved_locale,
    }
