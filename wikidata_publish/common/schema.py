"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

import re

from wikidata_publish.common.constants import PUBLISH_TARGETS
from wikidata_publish.common.errors import ConfigError

_QID_RE = re.compile(r"^Q\d+$")
_LOOKUP_TABLES = ("industries", "legal_forms", "countries", "cities")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"Expected a mapping for {ctx}")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_publisher_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {
        "user_agent",
        "summary",
        "use_bot_flag",
        "targets",
        "timeout",
        "retry",
        "rate_limit_per_sec",
    }
    _assert_required_keys(cfg, top_required, "publisher config")
    _assert_no_unknown_keys(cfg, top_required, "publisher config", allow_unknown)

    _assert_required_keys(cfg["targets"], set(PUBLISH_TARGETS), "targets")
    for target in PUBLISH_TARGETS:
        endpoint = cfg["targets"][target]
        if not isinstance(endpoint, str) or not endpoint.startswith("https://"):
            raise ConfigError(f"targets.{target} must be an https:// endpoint")

    _assert_required_keys(cfg["timeout"], {"connect", "read"}, "timeout")
    _assert_positive_number(cfg["timeout"]["connect"], "timeout.connect")
    _assert_positive_number(cfg["timeout"]["read"], "timeout.read")

    _assert_required_keys(cfg["retry"], {"max_attempts", "multiplier", "max_wait"}, "retry")
    max_attempts = cfg["retry"]["max_attempts"]
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
        raise ConfigError("retry.max_attempts must be an integer >= 1")

    _assert_positive_number(cfg["rate_limit_per_sec"], "rate_limit_per_sec")
    if not isinstance(cfg["use_bot_flag"], bool):
        raise ConfigError("use_bot_flag must be a boolean")
    if not isinstance(cfg["summary"], str) or not cfg["summary"].strip():
        raise ConfigError("summary must be a non-empty string")

    return cfg


def validate_qid_mappings_config(cfg: dict) -> dict:
    _assert_required_keys(cfg, set(_LOOKUP_TABLES), "qid_mappings")
    for table in _LOOKUP_TABLES:
        entries = cfg[table]
        if entries is None:
            cfg[table] = {}
            continue
        if not isinstance(entries, dict):
            raise ConfigError(f"qid_mappings.{table} must be a mapping")
        bad = sorted(str(key) for key, qid in entries.items() if not _QID_RE.match(str(qid)))
        if bad:
            raise ConfigError(f"Invalid QIDs in qid_mappings.{table}: {', '.join(bad)}")
    return cfg
