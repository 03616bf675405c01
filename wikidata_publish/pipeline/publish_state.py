"""On-disk publish state per business: lifecycle state and the QID once created."""

from __future__ import annotations

from pathlib import Path

from wikidata_publish.common.fs import read_json, write_json
from wikidata_publish.common.time_utils import utc_timestamp_iso
from wikidata_publish.publish.runner import PublishOutcome
from wikidata_publish.publish.state import PUBLISHING, START, STATES, UNPUBLISHED, transition


def state_path(data_dir: Path) -> Path:
    return data_dir / "state" / "publish_state.json"


def load_publish_state(path: Path) -> dict[str, dict]:
    if not path.exists():
        return {}
    payload = read_json(path)
    return payload.get("businesses", {})


def current_state(states: dict[str, dict], business_id: str) -> str:
    state = (states.get(business_id) or {}).get("state", UNPUBLISHED)
    return state if state in STATES else UNPUBLISHED


def mark_publishing(path: Path, business_id: str, *, target: str) -> dict[str, dict]:
    """Persist the in-flight marker before the create call goes out.

    The marker stays if the process dies mid-call; the business is then blocked
    until an operator reconciles it against the wiki.
    """
    states = load_publish_state(path)
    previous = states.get(business_id) or {}
    transition(current_state(states, business_id), START)
    states[business_id] = {
        "state": PUBLISHING,
        "target": target,
        "qid": previous.get("qid"),
        "error_code": None,
        "updated_at": utc_timestamp_iso(),
    }
    write_json(path, {"businesses": states})
    return states


def record_outcome(path: Path, outcome: PublishOutcome, *, target: str) -> dict[str, dict]:
    states = load_publish_state(path)
    previous = states.get(outcome.business_id) or {}
    states[outcome.business_id] = {
        "state": outcome.state,
        "target": target,
        "qid": outcome.qid or previous.get("qid"),
        "error_code": outcome.error_code,
        "updated_at": utc_timestamp_iso(),
    }
    write_json(path, {"businesses": states})
    return states
