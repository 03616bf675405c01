"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wikidata_publish.common.errors import ConfigError
from wikidata_publish.common.fs import read_yaml
from wikidata_publish.common.http import RetryConfig, TimeoutConfig
from wikidata_publish.common.schema import validate_publisher_config, validate_qid_mappings_config


@dataclass(frozen=True)
class QidLookups:
    """Static, read-only name -> QID tables used by the property mapper."""

    industries: dict[str, str]
    legal_forms: dict[str, str]
    countries: dict[str, str]
    cities: dict[str, str]

    @classmethod
    def empty(cls) -> "QidLookups":
        return cls(industries={}, legal_forms={}, countries={}, cities={})

    @classmethod
    def from_config(cls, cfg: dict) -> "QidLookups":
        def _normalised(table: dict) -> dict[str, str]:
            return {str(key).strip().lower(): str(qid) for key, qid in table.items()}

        return cls(
            industries=_normalised(cfg["industries"]),
            legal_forms=_normalised(cfg["legal_forms"]),
            countries=_normalised(cfg["countries"]),
            cities=_normalised(cfg["cities"]),
        )


@dataclass(frozen=True)
class ConfigBundle:
    publisher: dict
    qid_lookups: QidLookups

    def endpoint(self, target: str) -> str:
        try:
            return self.publisher["targets"][target]
        except KeyError as exc:
            raise ConfigError(f"Unknown publish target: {target}") from exc

    def timeout(self) -> TimeoutConfig:
        cfg = self.publisher["timeout"]
        return TimeoutConfig(connect=float(cfg["connect"]), read=float(cfg["read"]))

    def retry(self) -> RetryConfig:
        cfg = self.publisher["retry"]
        return RetryConfig(
            max_attempts=int(cfg["max_attempts"]),
            multiplier=float(cfg["multiplier"]),
            max_wait=float(cfg["max_wait"]),
        )


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    def _overlay(name: str) -> Path | None:
        return (overlay_config_dir / name) if overlay_config_dir is not None else None

    publisher = validate_publisher_config(
        _load_yaml_with_overlay(config_dir / "publisher.yml", _overlay("publisher.yml")),
        allow_unknown=allow_unknown,
    )
    qid_mappings = validate_qid_mappings_config(
        _load_yaml_with_overlay(config_dir / "qid_mappings.yml", _overlay("qid_mappings.yml"))
    )
    return ConfigBundle(publisher=publisher, qid_lookups=QidLookups.from_config(qid_mappings))
