"""Wikibase Action API publisher: the only code that writes to the wiki."""

from __future__ import annotations

import logging
import re

import requests

from wikidata_publish.common.config_loader import ConfigBundle
from wikidata_publish.common.http import HttpClient, HttpRequestError, RetryableHttpError, TimeoutConfig
from wikidata_publish.model.entity import WikidataEntity, check_entity_contract
from wikidata_publish.publish.errors import (
    FatalPublishError,
    TransientPublishError,
    classify_api_error,
)

LOGGER = logging.getLogger(__name__)

_QID_RE = re.compile(r"^Q\d+$")
# Token MediaWiki hands out to logged-out sessions; it can never authorise an edit.
ANONYMOUS_TOKEN = "+\\"


class ActionApiPublisher:
    def __init__(self, config: ConfigBundle, http_client: HttpClient) -> None:
        self.config = config
        self.http = http_client

    @classmethod
    def from_config(cls, config: ConfigBundle, session: requests.Session | None = None) -> "ActionApiPublisher":
        http_client = HttpClient(
            timeout=config.timeout(),
            retry=config.retry(),
            rate_limit_per_sec=float(config.publisher["rate_limit_per_sec"]),
            user_agent=config.publisher["user_agent"],
            session=session,
        )
        return cls(config, http_client)

    def _call(self, method: str, url: str, **kwargs) -> dict:
        try:
            if method == "GET":
                payload = self.http.get_json(url, **kwargs)
            else:
                payload = self.http.post_form_json(url, **kwargs)
        except RetryableHttpError as exc:
            raise TransientPublishError(str(exc), code=f"http-{exc.status_code}" if exc.status_code else None) from exc
        except HttpRequestError as exc:
            raise FatalPublishError(str(exc), code=f"http-{exc.status_code}" if exc.status_code else None) from exc
        except requests.Timeout as exc:
            raise TransientPublishError(f"Timed out calling {url}", code="timeout") from exc
        except requests.ConnectionError as exc:
            raise TransientPublishError(f"Connection failed for {url}", code="connection-error") from exc
        except requests.RequestException as exc:
            # dropped mid-body, undecodable body, redirect loops
            raise TransientPublishError(f"Network error calling {url}: {exc}", code="network-error") from exc

        if not isinstance(payload, dict):
            raise FatalPublishError(f"Unexpected response shape from {url}")
        error = payload.get("error")
        if isinstance(error, dict):
            raise classify_api_error(error)
        return payload

    def fetch_csrf_token(self, target: str) -> str:
        endpoint = self.config.endpoint(target)
        payload = self._call(
            "GET",
            endpoint,
            params={"action": "query", "meta": "tokens", "type": "csrf", "format": "json"},
        )
        token = ((payload.get("query") or {}).get("tokens") or {}).get("csrftoken")
        if not token or token == ANONYMOUS_TOKEN:
            raise FatalPublishError("No usable CSRF token in response; the session is not logged in", code="notoken")
        return token

    def build_request(self, entity: WikidataEntity, csrf_token: str, *, summary: str | None = None) -> dict[str, str]:
        data = {
            "action": "wbeditentity",
            "new": "item",
            "data": entity.to_json(),
            "token": csrf_token,
            "format": "json",
            "summary": summary or self.config.publisher["summary"],
        }
        if self.config.publisher["use_bot_flag"]:
            data["bot"] = "1"
        return data

    def publish(
        self,
        entity: WikidataEntity,
        target: str,
        csrf_token: str,
        *,
        timeout: TimeoutConfig | None = None,
        summary: str | None = None,
    ) -> str:
        """Create a new item from ``entity`` and return its QID.

        Raises a ``PublishError`` subclass on every failure. The POST is never retried
        here: a timed-out create may still have succeeded remotely, so the retry decision
        belongs to the caller.
        """
        endpoint = self.config.endpoint(target)
        check_entity_contract(entity)
        request = self.build_request(entity, csrf_token, summary=summary)
        LOGGER.debug("wbeditentity POST to %s with %d properties", endpoint, len(entity.claims))

        payload = self._call("POST", endpoint, data=request, timeout=timeout, max_attempts=1)

        entity_id = (payload.get("entity") or {}).get("id")
        if payload.get("success") != 1 or not isinstance(entity_id, str) or not _QID_RE.match(entity_id):
            raise FatalPublishError(f"Publish response carried no item id: {payload!r}", code="no-entity-id")
        return entity_id

