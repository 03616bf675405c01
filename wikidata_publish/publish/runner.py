"""Caller-side publish policy: token refresh, bounded backoff, lifecycle bookkeeping."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from wikidata_publish.common.http import RetryConfig, TimeoutConfig
from wikidata_publish.common.logging import log_event, log_failure
from wikidata_publish.model.entity import WikidataEntity
from wikidata_publish.publish.action_api import ActionApiPublisher
from wikidata_publish.publish.errors import PublishError, TokenExpiredError, TransientPublishError
from wikidata_publish.publish.state import FAIL, START, SUCCEED, UNPUBLISHED, transition

LOGGER = logging.getLogger(__name__)

TokenProvider = Callable[[], str]


@dataclass(frozen=True)
class PublishOutcome:
    business_id: str
    state: str
    qid: str | None = None
    error_code: str | None = None
    attempts: int = 0
    message: str | None = None
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def publish_with_retry(
    publisher: ActionApiPublisher,
    entity: WikidataEntity,
    target: str,
    *,
    business_id: str,
    token_provider: TokenProvider,
    retry_config: RetryConfig | None = None,
    state: str = UNPUBLISHED,
    timeout: TimeoutConfig | None = None,
    logger: logging.Logger | None = None,
) -> PublishOutcome:
    """Publish ``entity`` once the lifecycle allows it.

    A rejected token is refreshed through ``token_provider`` and the call repeated once.
    Transient failures are retried with exponential backoff up to
    ``retry_config.max_attempts`` publish rounds; fatal failures are returned at once.
    Starting from ``publishing`` or ``published`` raises ``ContractError``.
    """
    retry_config = retry_config or RetryConfig()
    logger = logger or LOGGER
    state = transition(state, START)
    attempts = 0
    token: str | None = None
    refreshed = False

    def _send() -> str:
        nonlocal attempts
        attempts += 1
        started = time.monotonic()
        try:
            qid = publisher.publish(entity, target, token, timeout=timeout)
        except PublishError as exc:
            log_failure(
                logger,
                "publish attempt failed",
                stage="publish",
                business_id=business_id,
                target=target,
                event="PUBLISH_ATTEMPT",
                status="error",
                attempt=attempts,
                duration_ms=int((time.monotonic() - started) * 1000),
                error_code=exc.error_code,
            )
            raise
        log_event(
            logger,
            "publish attempt succeeded",
            stage="publish",
            business_id=business_id,
            target=target,
            event="PUBLISH_ATTEMPT",
            status="ok",
            attempt=attempts,
            duration_ms=int((time.monotonic() - started) * 1000),
            property_count=len(entity.claims),
        )
        return qid

    @retry(
        stop=stop_after_attempt(retry_config.max_attempts),
        wait=wait_exponential_jitter(
            initial=retry_config.multiplier,
            max=retry_config.max_wait,
            jitter=1.0,
        ),
        retry=retry_if_exception_type(TransientPublishError),
        reraise=True,
    )
    def _round() -> str:
        nonlocal token, refreshed
        if token is None:
            token = token_provider()
        try:
            return _send()
        except TokenExpiredError:
            if refreshed:
                raise
            refreshed = True
            token = token_provider()
            return _send()

    try:
        qid = _round()
    except PublishError as exc:
        return PublishOutcome(
            business_id=business_id,
            state=transition(state, FAIL),
            error_code=exc.error_code,
            attempts=attempts,
            message=str(exc),
            retryable=exc.retryable,
        )
    return PublishOutcome(
        business_id=business_id,
        state=transition(state, SUCCEED),
        qid=qid,
        attempts=attempts,
    )
