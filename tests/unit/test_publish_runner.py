from __future__ import annotations

import pytest

from wikidata_publish.assembly.assembler import assemble
from wikidata_publish.common.errors import ContractError
from wikidata_publish.common.http import RetryConfig
from wikidata_publish.model.inputs import BusinessRecord
from wikidata_publish.publish.errors import FatalPublishError, TokenExpiredError, TransientPublishError
from wikidata_publish.publish.runner import publish_with_retry
from wikidata_publish.publish.state import (
    ERROR,
    PUBLISHED,
    PUBLISHING,
    UNPUBLISHED,
    can_start,
    transition,
)

NO_WAIT = RetryConfig(max_attempts=2, multiplier=0.0, max_wait=0)


class ScriptedPublisher:
    """Returns or raises the scripted results in order, recording the tokens it saw."""

    def __init__(self, *results):
        self.results = list(results)
        self.tokens = []

    def publish(self, entity, target, csrf_token, *, timeout=None):
        self.tokens.append(csrf_token)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class Tokens:
    def __init__(self):
        self.issued = 0

    def __call__(self) -> str:
        self.issued += 1
        return f"token-{self.issued}"


def _run(publisher, tokens=None, **kwargs):
    entity = assemble(BusinessRecord(business_id="biz-1", name="Acme", url="https://acmecoffee.com"))
    return publish_with_retry(
        publisher,
        entity,
        "test",
        business_id="biz-1",
        token_provider=tokens or Tokens(),
        retry_config=kwargs.pop("retry_config", NO_WAIT),
        **kwargs,
    )


def test_first_attempt_success():
    outcome = _run(ScriptedPublisher("Q42"))
    assert outcome.state == PUBLISHED
    assert outcome.qid == "Q42"
    assert outcome.attempts == 1
    assert outcome.error_code is None


def test_bad_token_is_refreshed_once():
    publisher = ScriptedPublisher(TokenExpiredError("badtoken", code="badtoken"), "Q42")
    tokens = Tokens()
    outcome = _run(publisher, tokens)
    assert outcome.state == PUBLISHED
    assert outcome.attempts == 2
    assert tokens.issued == 2
    assert publisher.tokens == ["token-1", "token-2"]


def test_second_bad_token_gives_up():
    publisher = ScriptedPublisher(
        TokenExpiredError("badtoken", code="badtoken"),
        TokenExpiredError("badtoken", code="badtoken"),
    )
    outcome = _run(publisher)
    assert outcome.state == ERROR
    assert outcome.error_code == "PUBLISH_BAD_TOKEN"
    assert outcome.retryable is True
    assert outcome.attempts == 2


def test_transient_failure_is_retried_with_backoff():
    publisher = ScriptedPublisher(TransientPublishError("maxlag", code="maxlag"), "Q7")
    outcome = _run(publisher)
    assert outcome.state == PUBLISHED
    assert outcome.qid == "Q7"
    assert outcome.attempts == 2


def test_transient_failures_stop_at_max_attempts():
    publisher = ScriptedPublisher(*(TransientPublishError("timeout") for _ in range(5)))
    outcome = _run(publisher, retry_config=RetryConfig(max_attempts=3, multiplier=0.0, max_wait=0))
    assert outcome.state == ERROR
    assert outcome.attempts == 3
    assert outcome.error_code == "PUBLISH_TRANSIENT"
    assert outcome.retryable is True


def test_fatal_failure_is_never_retried():
    publisher = ScriptedPublisher(FatalPublishError("modification-failed", code="modification-failed"), "Q1")
    outcome = _run(publisher)
    assert outcome.state == ERROR
    assert outcome.attempts == 1
    assert outcome.error_code == "PUBLISH_FATAL"
    assert outcome.retryable is False
    assert "modification-failed" in outcome.message


def test_retry_from_error_state_is_allowed():
    outcome = _run(ScriptedPublisher("Q9"), state=ERROR)
    assert outcome.state == PUBLISHED


@pytest.mark.parametrize("state", [PUBLISHING, PUBLISHED])
def test_runner_refuses_to_start_from_busy_or_done_states(state):
    publisher = ScriptedPublisher("Q9")
    with pytest.raises(ContractError):
        _run(publisher, state=state)
    assert publisher.tokens == []


def test_state_machine_transitions():
    assert transition(UNPUBLISHED, "start") == PUBLISHING
    assert transition(ERROR, "start") == PUBLISHING
    assert transition(PUBLISHING, "succeed") == PUBLISHED
    assert transition(PUBLISHING, "fail") == ERROR
    assert can_start(UNPUBLISHED)
    assert not can_start(PUBLISHED)
    with pytest.raises(ContractError):
        transition(PUBLISHED, "start")
    with pytest.raises(ContractError):
        transition(UNPUBLISHED, "succeed")
    with pytest.raises(ContractError):
        transition("archived", "start")
