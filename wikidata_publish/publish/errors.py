"""Classified publish failures.

Every failure of the publisher is one of three kinds, and the kind alone decides the
retry policy: refresh the token, back off and retry, or stop.
"""

from __future__ import annotations

import re
from typing import Any

from wikidata_publish.common.errors import PipelineError

_PID_RE = re.compile(r"P\d+")
_FULL_PID_RE = re.compile(r"^P\d+$")

TRANSIENT_API_CODES = frozenset({"maxlag", "ratelimited", "readonly"})
TRANSIENT_API_PREFIXES = ("internal_api_error_",)


class PublishError(PipelineError):
    error_code = "PUBLISH_ERROR"
    retryable = False

    def __init__(self, message: str, *, code: str | None = None, info: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.info = info


class TokenExpiredError(PublishError):
    """The CSRF token was rejected; fetch a fresh one and retry once."""

    error_code = "PUBLISH_BAD_TOKEN"
    retryable = True


class TransientPublishError(PublishError):
    """Network trouble, server lag or throttling; retry with backoff."""

    error_code = "PUBLISH_TRANSIENT"
    retryable = True


class FatalPublishError(PublishError):
    """The wiki rejected the entity itself. Retrying will not help; the mapping is wrong."""

    error_code = "PUBLISH_FATAL"
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        info: str | None = None,
        message_names: tuple[str, ...] = (),
        property_ids: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, code=code, info=info)
        self.message_names = message_names
        self.property_ids = property_ids


def _property_ids(error: dict[str, Any]) -> tuple[str, ...]:
    found: list[str] = []
    for message in error.get("messages") or ():
        if not isinstance(message, dict):
            continue
        for param in message.get("parameters") or ():
            if isinstance(param, str) and _FULL_PID_RE.match(param):
                found.append(param)
    info = error.get("info")
    if isinstance(info, str):
        found.extend(_PID_RE.findall(info))
    return tuple(dict.fromkeys(found))


def _message_names(error: dict[str, Any]) -> tuple[str, ...]:
    return tuple(
        str(message["name"])
        for message in error.get("messages") or ()
        if isinstance(message, dict) and message.get("name")
    )


def classify_api_error(error: dict[str, Any]) -> PublishError:
    """Map the ``error`` object of an Action API response to a publish error."""
    code = str(error.get("code") or "unknown")
    info = error.get("info")
    text = f"{code}: {info}" if info else code

    if code == "badtoken":
        return TokenExpiredError(text, code=code, info=info)
    if code in TRANSIENT_API_CODES or code.startswith(TRANSIENT_API_PREFIXES):
        return TransientPublishError(text, code=code, info=info)
    return FatalPublishError(
        text,
        code=code,
        info=info,
        message_names=_message_names(error),
        property_ids=_property_ids(error),
    )
