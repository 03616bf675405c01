"""Claim and reference construction from crawl provenance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from wikidata_publish.assembly.parsing import is_http_url
from wikidata_publish.common.constants import DEFAULT_LANGUAGE
from wikidata_publish.common.text import clean_text
from wikidata_publish.common.time_utils import parse_iso_day, wikibase_day_timestamp
from wikidata_publish.model.datavalues import Datavalue, MonolingualTextValue, Snak, StringValue, TimeValue
from wikidata_publish.model.inputs import BusinessRecord, CrawledData
from wikidata_publish.model.statements import Claim, Reference

REFERENCE_URL_PID = "P854"
TITLE_PID = "P1476"
RETRIEVED_PID = "P813"


@dataclass(frozen=True)
class Provenance:
    """Where the assembled facts came from: a URL, optionally a page title and a retrieval day."""

    source_url: str | None = None
    title: str | None = None
    retrieved: date | None = None

    @classmethod
    def from_inputs(cls, record: BusinessRecord, crawled: CrawledData | None) -> "Provenance":
        crawled = crawled or CrawledData()
        source_url = None
        for candidate in (crawled.source_url, record.url):
            if is_http_url(candidate):
                source_url = clean_text(candidate)
                break
        return cls(
            source_url=source_url,
            title=clean_text(crawled.page_title),
            retrieved=parse_iso_day(crawled.crawled_at),
        )

    def reference(self) -> Reference | None:
        if self.source_url is None:
            return None
        snaks: dict[str, tuple[Snak, ...]] = {
            REFERENCE_URL_PID: (Snak.value(REFERENCE_URL_PID, StringValue(self.source_url)),),
        }
        if self.title is not None:
            snaks[TITLE_PID] = (
                Snak.value(TITLE_PID, MonolingualTextValue(text=self.title, language=DEFAULT_LANGUAGE)),
            )
        if self.retrieved is not None:
            snaks[RETRIEVED_PID] = (Snak.value(RETRIEVED_PID, day_time_value(self.retrieved)),)
        return Reference(snaks=snaks)


def day_time_value(day: date) -> TimeValue:
    return TimeValue(time=wikibase_day_timestamp(day), precision=11)


def build_claim(
    pid: str,
    datavalue: Datavalue,
    *,
    reference: Reference | None = None,
    qualifiers: dict[str, tuple[Snak, ...]] | None = None,
) -> Claim:
    qualifiers = qualifiers or {}
    return Claim(
        mainsnak=Snak.value(pid, datavalue),
        references=(reference,) if reference is not None else (),
        qualifiers=qualifiers,
        qualifiers_order=tuple(qualifiers),
    )
