"""Configuration loading for i18n extraction (.i18n.yml or Cargo.toml)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .markers import DEFAULT_MARKERS, Marker

CONFIG_FILENAME = ".i18n.yml"
DEFAULT_CATALOG = "locales/catalog.yml"
DEFAULT_CATALOG_NAME = "catalog.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class KeyOptions:
    """Settings for keys derived from message text."""

    minify_len: int = 24
    minify_prefix: str = ""
    minify_threshold: int = 127


@dataclass
class I18nConfig:
    """Represents the settings defined in .i18n.yml or Cargo.toml."""

    root: Path
    catalog_path: Path = Path(DEFAULT_CATALOG)
    source_locale: str = "en"
    available_locales: List[str] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=lambda: list(DEFAULT_MARKERS))
    strict: bool = False
    workers: Optional[int] = None
    write_locations: bool = True
    keys: KeyOptions = field(default_factory=KeyOptions)
    languages: Optional[List[str]] = None
    source: Optional[Path] = None

    @property
    def catalog_file(self) -> Path:
        path = self.catalog_path
        if not path.is_absolute():
            path = self.root / path
        return path


def load_config(root: Path) -> I18nConfig:
    """Load configuration for the project rooted at ``root``."""
    root = root.expanduser().resolve()

    config_file = root / CONFIG_FILENAME
    if config_file.exists():
        data = _read_yaml(config_file)
        return _build_config(root, data, source=config_file)

    cargo_file = root / "Cargo.toml"
    if cargo_file.exists():
        data = _read_cargo_metadata(cargo_file)
        if data:
            return _build_config(root, data, source=cargo_file)

    return I18nConfig(root=root)


def _read_yaml(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _read_cargo_metadata(path: Path) -> Dict[str, Any]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    package = _as_dict(data.get("package"))
    metadata = _as_dict(package.get("metadata"))
    section = metadata.get("i18n")
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError("[package.metadata.i18n] must be a table")
    return section


def _build_config(root: Path, raw: Dict[str, Any], *, source: Path) -> I18nConfig:
    data = {_normalise_key(key): value for key, value in raw.items()}
    config = I18nConfig(root=root, source=source)

    catalog = _as_str(data.get("catalog"))
    load_path = _as_str(data.get("load_path"))
    if catalog:
        config.catalog_path = Path(catalog)
    elif load_path:
        # Cargo.toml style: a directory holding the locale files.
        config.catalog_path = Path(load_path) / DEFAULT_CATALOG_NAME

    locale = _as_str(data.get("source_locale")) or _as_str(data.get("default_locale"))
    if locale:
        config.source_locale = locale
    config.available_locales = _as_str_list(data.get("available_locales"))
    config.exclude_paths = _as_str_list(data.get("exclude"))
    config.exclude_paths.extend(_as_str_list(data.get("exclude_paths")))

    if "languages" in data:
        config.languages = _as_str_list(data.get("languages"))

    if "markers" in data:
        config.markers = _as_markers(data.get("markers"))
    if _as_bool(data.get("minify_key")):
        config.markers = [Marker(marker.name, minify_key=True) for marker in config.markers]

    strict = _as_bool(data.get("strict"))
    if strict is not None:
        config.strict = strict

    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError("workers must be a positive integer")
        config.workers = workers

    locations = _as_bool(data.get("locations"))
    if locations is not None:
        config.write_locations = locations

    minify_len = _as_int(data.get("minify_key_len"))
    if minify_len is not None:
        if minify_len < 1:
            raise ConfigError("minify-key-len must be a positive integer")
        config.keys.minify_len = minify_len
    prefix = _as_str(data.get("minify_key_prefix"))
    if prefix is not None:
        config.keys.minify_prefix = prefix
    threshold = _as_int(data.get("minify_key_thresh"))
    if threshold is not None:
        config.keys.minify_threshold = threshold

    return config


def _normalise_key(key: Any) -> str:
    return str(key).strip().lower().replace("-", "_")


def _as_markers(value: Any) -> List[Marker]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError("markers must be a list of names or mappings")
    markers: List[Marker] = []
    for item in value:
        if isinstance(item, str):
            markers.append(Marker(item))
        elif isinstance(item, dict):
            fields = {_normalise_key(key): val for key, val in item.items()}
            name = _as_str(fields.get("name"))
            if not name:
                raise ConfigError("marker mappings require a name")
            minify = _as_bool(fields.get("minify_key")) or False
            markers.append(Marker(name, minify_key=minify))
        else:
            raise ConfigError(f"Unsupported marker entry: {item!r}")
    return markers


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ConfigError", "I18nConfig", "KeyOptions", "load_config"]
