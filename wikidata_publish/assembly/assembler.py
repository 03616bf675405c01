"""Entity assembly: business record (+ crawl data) -> Wikibase item entity."""

from __future__ import annotations

from wikidata_publish.assembly.property_map import MappingContext, map_properties
from wikidata_publish.common.config_loader import QidLookups
from wikidata_publish.common.constants import DEFAULT_LANGUAGE, MAX_TERM_LENGTH
from wikidata_publish.common.text import clean_text, truncate_utf16
from wikidata_publish.model.entity import Term, WikidataEntity
from wikidata_publish.model.inputs import BusinessRecord, CrawledData

PLACEHOLDER_LABEL = "Unnamed business"
GENERIC_DESCRIPTION = "Local business"


def _fit(text: str) -> str:
    return truncate_utf16(text, MAX_TERM_LENGTH)


def build_label(record: BusinessRecord, crawled: CrawledData | None = None) -> str:
    crawled = crawled or CrawledData()
    for candidate in (crawled.name, record.name, record.business_id):
        text = clean_text(candidate)
        if text:
            return _fit(text)
    return PLACEHOLDER_LABEL


def build_description(record: BusinessRecord, crawled: CrawledData | None = None) -> str:
    crawled = crawled or CrawledData()
    description = clean_text(crawled.description)
    if description:
        return _fit(description)

    city = state = None
    for location in (crawled.location, record.location):
        if location is None:
            continue
        city = city or clean_text(location.city)
        state = state or clean_text(location.state)
    place = ", ".join(part for part in (city, state) if part)
    if place:
        return _fit(f"{GENERIC_DESCRIPTION} in {place}")
    return GENERIC_DESCRIPTION


def assemble(
    record: BusinessRecord,
    crawled: CrawledData | None = None,
    *,
    lookups: QidLookups | None = None,
) -> WikidataEntity:
    """Build the item entity for one business.

    Deterministic for identical input: no clock reads, no I/O. Properties whose source
    data is missing are omitted; label and description always have a value.
    """
    ctx = MappingContext.build(record, crawled, lookups)
    return WikidataEntity(
        labels={DEFAULT_LANGUAGE: Term(language=DEFAULT_LANGUAGE, value=build_label(record, crawled))},
        descriptions={
            DEFAULT_LANGUAGE: Term(language=DEFAULT_LANGUAGE, value=build_description(record, crawled)),
        },
        claims=map_properties(ctx),
    )
