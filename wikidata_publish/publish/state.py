"""Publish lifecycle of a single business."""

from __future__ import annotations

from wikidata_publish.common.errors import ContractError

UNPUBLISHED = "unpublished"
PUBLISHING = "publishing"
PUBLISHED = "published"
ERROR = "error"
STATES = (UNPUBLISHED, PUBLISHING, PUBLISHED, ERROR)

START = "start"
SUCCEED = "succeed"
FAIL = "fail"

TRANSITIONS: dict[tuple[str, str], str] = {
    (UNPUBLISHED, START): PUBLISHING,
    (ERROR, START): PUBLISHING,
    (PUBLISHING, SUCCEED): PUBLISHED,
    (PUBLISHING, FAIL): ERROR,
}


def transition(state: str, event: str) -> str:
    if state not in STATES:
        raise ContractError(f"Unknown publish state: {state!r}")
    try:
        return TRANSITIONS[(state, event)]
    except KeyError as exc:
        raise ContractError(f"Illegal publish transition: {event} from {state}") from exc


def can_start(state: str) -> bool:
    return (state, START) in TRANSITIONS
