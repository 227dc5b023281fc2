from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import urlparse

import yaml

from ..models import HtmlSelectors, SourceConfig, Topic, Workspace


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


SOURCE_TYPES = {"rss", "topic_search", "html", "social"}
# Source types that cannot work without a URL
_URL_REQUIRED = {"rss", "html"}


def _require(entry: dict, fields: Iterable[str], what: str) -> None:
    missing = set(fields) - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields for {what}: {sorted(missing)} in {entry}")


def _string_list(entry: dict, key: str) -> List[str]:
    value = entry.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, (str, int)) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings if provided")
    return [str(v).strip() for v in value if str(v).strip()]


def _validate_url(url_str: str) -> str:
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}'. Must be absolute http(s) URL.")
    return url_str


def _coerce_selectors(raw: Optional[dict], source_name: str) -> Optional[HtmlSelectors]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError(f"'selectors' for source '{source_name}' must be a mapping")
    _require(raw, ("list", "title", "link"), f"selectors of '{source_name}'")
    date = raw.get("date")
    return HtmlSelectors(
        list=str(raw["list"]).strip(),
        title=str(raw["title"]).strip(),
        link=str(raw["link"]).strip(),
        date=str(date).strip() if date else None,
    )


def _coerce_source(entry: dict) -> SourceConfig:
    """Validate and convert one source mapping.

    Required: name, type ('rss' | 'topic_search' | 'html' | 'social').
    ``url`` is required for rss and html. ``selectors`` (list/title/link and
    optional date) only matter for html sources; a missing block is reported
    at fetch time rather than here so one broken source cannot block a workspace.
    """
    _require(entry, ("name", "type"), "source")
    source_type = str(entry["type"]).strip()
    if source_type not in SOURCE_TYPES:
        raise ConfigError(
            f"Invalid type '{source_type}'. Must be one of {sorted(SOURCE_TYPES)}."
        )
    name = str(entry["name"]).strip()
    url = entry.get("url")
    if url is not None:
        url = _validate_url(str(url).strip())
    elif source_type in _URL_REQUIRED:
        raise ConfigError(f"Source '{name}' of type '{source_type}' requires 'url'")

    return SourceConfig(
        name=name,
        type=source_type,  # type: ignore[arg-type]
        url=url,
        selectors=_coerce_selectors(entry.get("selectors"), name),
        active=bool(entry.get("active", True)),
    )


def _coerce_topic(entry: dict) -> Topic:
    _require(entry, ("id", "name", "description", "model"), "topic")
    try:
        cap = int(entry.get("max_sources_per_run", 50))
    except (TypeError, ValueError):
        raise ConfigError(f"'max_sources_per_run' must be an integer in topic {entry['id']}") from None
    if cap < 0:
        raise ConfigError(f"'max_sources_per_run' must be >= 0 in topic {entry['id']}")
    return Topic(
        id=str(entry["id"]).strip(),
        name=str(entry["name"]).strip(),
        description=str(entry["description"]).strip(),
        model=str(entry["model"]).strip(),
        negative_filters=_string_list(entry, "negative_filters"),
        max_sources_per_run=cap,
        active=bool(entry.get("active", True)),
    )


def _coerce_workspace(entry: dict) -> Workspace:
    _require(entry, ("id",), "workspace")
    for key in ("topics", "sources"):
        if entry.get(key) is not None and not isinstance(entry[key], list):
            raise ConfigError(f"'{key}' must be a list in workspace {entry['id']}")
    items = [*(entry.get("topics") or []), *(entry.get("sources") or [])]
    if not all(isinstance(item, dict) for item in items):
        raise ConfigError(f"Topics and sources must be mappings in workspace {entry['id']}")

    sources = [_coerce_source(s) for s in entry.get("sources") or []]
    names = [s.name for s in sources]
    if len(names) != len(set(names)):
        raise ConfigError(f"Duplicate source names in workspace {entry['id']}")

    return Workspace(
        id=str(entry["id"]).strip(),
        topics=[_coerce_topic(t) for t in entry.get("topics") or []],
        sources=sources,
        recipients=_string_list(entry, "recipients"),
    )


def load_workspaces_config(path: Path | str) -> List[Workspace]:
    """Load ``workspaces.yaml`` into typed ``Workspace`` instances.

    YAML structure:
      - Key ``workspaces``: list of mappings with
          - id: string (required)
          - recipients: list of notification channel ids (optional)
          - topics: list of {id, name, description, model, negative_filters,
            max_sources_per_run, active}
          - sources: list of {name, type, url, selectors, active}

    Unknown keys are ignored for forward compatibility.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML value must be a mapping")
    raw = data.get("workspaces") or []
    if not isinstance(raw, list):
        raise ConfigError("'workspaces' must be a list in the YAML configuration")

    workspaces: List[Workspace] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each workspace must be a mapping, got: {type(item)}")
        workspaces.append(_coerce_workspace(item))
    return workspaces
