"""Declarative property-mapping table.

Each ``PropertyMapping`` names a PID and knows how to pull one datavalue out of a
``MappingContext``. ``map_properties`` walks the table in its fixed order, so adding a
property means adding a row here. Extractors follow one precedence rule: the crawled
field first, then the business record, otherwise nothing (a mapping gap is never an
error and never yields an empty value).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from wikidata_publish.assembly.parsing import (
    extract_social_username,
    is_http_url,
    normalise_email,
    normalise_phone,
    normalise_ticker,
    parse_employee_count,
    parse_partial_date,
)
from wikidata_publish.assembly.references import Provenance, build_claim, day_time_value
from wikidata_publish.common.config_loader import QidLookups
from wikidata_publish.common.constants import BUSINESS_QID, COORDINATE_PRECISION, DEFAULT_LANGUAGE
from wikidata_publish.common.text import clean_text
from wikidata_publish.model.datavalues import (
    Datavalue,
    EntityIdValue,
    GlobeCoordinateValue,
    MonolingualTextValue,
    QuantityValue,
    Snak,
    StringValue,
    TimeValue,
)
from wikidata_publish.model.inputs import BusinessRecord, CrawledData, Location
from wikidata_publish.model.statements import Claim

LOGGER = logging.getLogger(__name__)

POINT_IN_TIME_PID = "P585"


@dataclass(frozen=True)
class MappingContext:
    record: BusinessRecord
    crawled: CrawledData = field(default_factory=CrawledData)
    lookups: QidLookups = field(default_factory=QidLookups.empty)
    provenance: Provenance = field(default_factory=Provenance)

    @classmethod
    def build(
        cls,
        record: BusinessRecord,
        crawled: CrawledData | None = None,
        lookups: QidLookups | None = None,
    ) -> "MappingContext":
        return cls(
            record=record,
            crawled=crawled or CrawledData(),
            lookups=lookups or QidLookups.empty(),
            provenance=Provenance.from_inputs(record, crawled),
        )

    def locations(self) -> list[Location]:
        return [loc for loc in (self.crawled.location, self.record.location) if loc is not None]


Extractor = Callable[[MappingContext], "Datavalue | None"]
Qualifier = Callable[[MappingContext], "dict[str, tuple[Snak, ...]]"]


@dataclass(frozen=True)
class PropertyMapping:
    pid: str
    label: str
    extract: Extractor
    referenced: bool = True
    qualify: Qualifier | None = None

    def build(self, ctx: MappingContext) -> Claim | None:
        datavalue = self.extract(ctx)
        if datavalue is None:
            return None
        reference = ctx.provenance.reference() if self.referenced else None
        qualifiers = self.qualify(ctx) if self.qualify is not None else None
        return build_claim(self.pid, datavalue, reference=reference, qualifiers=qualifiers)


def _first_text(*values: object) -> str | None:
    for value in values:
        text = clean_text(value)
        if text is not None:
            return text
    return None


def _item(qid: str | None) -> EntityIdValue | None:
    return EntityIdValue(id=qid) if qid else None


def _lookup(table: dict[str, str], key: str | None) -> str | None:
    if key is None:
        return None
    return table.get(key.strip().lower())


def _time(raw: object) -> TimeValue | None:
    parsed = parse_partial_date(raw)
    if parsed is None:
        return None
    return TimeValue(time=parsed.wikibase_time(), precision=parsed.precision)


def _instance_of(ctx: MappingContext) -> Datavalue | None:
    return EntityIdValue(id=BUSINESS_QID)


def _official_website(ctx: MappingContext) -> Datavalue | None:
    if not is_http_url(ctx.record.url):
        return None
    return StringValue(clean_text(ctx.record.url))


def _official_name(ctx: MappingContext) -> Datavalue | None:
    name = _first_text(ctx.crawled.name, ctx.record.name)
    return StringValue(name) if name else None


def _coordinates(ctx: MappingContext) -> Datavalue | None:
    for location in ctx.locations():
        if not location.has_coordinates():
            continue
        if -90 <= location.latitude <= 90 and -180 <= location.longitude <= 180:
            return GlobeCoordinateValue(
                latitude=location.latitude,
                longitude=location.longitude,
                precision=COORDINATE_PRECISION,
            )
    return None


def _street_address(ctx: MappingContext) -> Datavalue | None:
    address = _first_text(
        ctx.crawled.address,
        *(location.address for location in ctx.locations()),
    )
    return MonolingualTextValue(text=address, language=DEFAULT_LANGUAGE) if address else None


def _located_in(ctx: MappingContext) -> Datavalue | None:
    for location in ctx.locations():
        city, state = clean_text(location.city), clean_text(location.state)
        if city and state:
            qid = _lookup(ctx.lookups.cities, f"{city}, {state}")
            if qid:
                return _item(qid)
    LOGGER.debug("no city mapping for %s", ctx.record.business_id)
    return None


def _country(ctx: MappingContext) -> Datavalue | None:
    for location in ctx.locations():
        qid = _lookup(ctx.lookups.countries, clean_text(location.country))
        if qid:
            return _item(qid)
    return None


def _industry(ctx: MappingContext) -> Datavalue | None:
    details = ctx.crawled.business_details
    for candidate in (
        details.industry,
        details.sector,
        ctx.crawled.llm_enhanced.business_category,
        ctx.record.category,
    ):
        qid = _lookup(ctx.lookups.industries, clean_text(candidate))
        if qid:
            return _item(qid)
    return None


def _legal_form(ctx: MappingContext) -> Datavalue | None:
    return _item(_lookup(ctx.lookups.legal_forms, clean_text(ctx.crawled.business_details.legal_form)))


def _phone(ctx: MappingContext) -> Datavalue | None:
    phone = normalise_phone(ctx.crawled.phone)
    return StringValue(phone) if phone else None


def _email(ctx: MappingContext) -> Datavalue | None:
    email = normalise_email(ctx.crawled.email)
    return StringValue(f"mailto:{email}") if email else None


def _inception(ctx: MappingContext) -> Datavalue | None:
    return _time(ctx.crawled.founded) or _time(ctx.crawled.business_details.founded)


def _dissolved(ctx: MappingContext) -> Datavalue | None:
    return _time(ctx.crawled.business_details.dissolved)


def _employees(ctx: MappingContext) -> Datavalue | None:
    count = parse_employee_count(ctx.crawled.business_details.employee_count)
    if count is None:
        return None
    return QuantityValue(
        amount=f"+{count.amount}",
        upper_bound=f"+{count.upper_bound}" if count.upper_bound is not None else None,
        lower_bound=f"+{count.lower_bound}" if count.lower_bound is not None else None,
    )


def _employees_as_of(ctx: MappingContext) -> dict[str, tuple[Snak, ...]]:
    if ctx.provenance.retrieved is None:
        return {}
    return {POINT_IN_TIME_PID: (Snak.value(POINT_IN_TIME_PID, day_time_value(ctx.provenance.retrieved)),)}


def _ticker(ctx: MappingContext) -> Datavalue | None:
    ticker = normalise_ticker(ctx.crawled.business_details.stock_symbol)
    return StringValue(ticker) if ticker else None


def _social(platform: str) -> Extractor:
    def _extract(ctx: MappingContext) -> Datavalue | None:
        username = extract_social_username(getattr(ctx.crawled.social_links, platform), platform)
        return StringValue(username) if username else None

    return _extract


PROPERTY_MAPPINGS: tuple[PropertyMapping, ...] = (
    PropertyMapping("P31", "instance of", _instance_of),
    PropertyMapping("P856", "official website", _official_website, referenced=False),
    PropertyMapping("P1448", "official name", _official_name),
    PropertyMapping("P625", "coordinate location", _coordinates),
    PropertyMapping("P6375", "street address", _street_address),
    PropertyMapping("P131", "located in the administrative territorial entity", _located_in),
    PropertyMapping("P17", "country", _country),
    PropertyMapping("P452", "industry", _industry),
    PropertyMapping("P1454", "legal form", _legal_form),
    PropertyMapping("P1329", "phone number", _phone),
    PropertyMapping("P968", "email address", _email),
    PropertyMapping("P571", "inception", _inception),
    PropertyMapping("P576", "dissolved, abolished or demolished date", _dissolved),
    PropertyMapping("P1128", "employees", _employees, qualify=_employees_as_of),
    PropertyMapping("P249", "ticker symbol", _ticker),
    PropertyMapping("P2002", "X username", _social("twitter")),
    PropertyMapping("P2013", "Facebook username", _social("facebook")),
    PropertyMapping("P2003", "Instagram username", _social("instagram")),
    PropertyMapping("P4264", "LinkedIn company ID", _social("linkedin")),
)


def map_properties(ctx: MappingContext) -> dict[str, tuple[Claim, ...]]:
    claims: dict[str, tuple[Claim, ...]] = {}
    for mapping in PROPERTY_MAPPINGS:
        claim = mapping.build(ctx)
        if claim is None:
            LOGGER.debug("mapping gap %s for %s", mapping.pid, ctx.record.business_id)
            continue
        claims[mapping.pid] = (claim,)
    return claims
