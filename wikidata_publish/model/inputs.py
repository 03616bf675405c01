"""Input records consumed by the assembler and the notability gate.

All of these come from upstream collaborators (the business store, the crawler and the
web notability heuristic). ``from_dict`` accepts both the upstream camelCase keys and
snake_case; unknown keys are ignored and missing keys become ``None``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


def _pick(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class Location:
    city: str | None = None
    state: str | None = None
    country: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "Location | None":
        if not isinstance(payload, dict):
            return None
        return cls(
            city=payload.get("city"),
            state=payload.get("state"),
            country=payload.get("country"),
            address=payload.get("address"),
            latitude=_as_float(_pick(payload, "latitude", "lat")),
            longitude=_as_float(_pick(payload, "longitude", "lng", "lon")),
        )

    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class SocialLinks:
    twitter: str | None = None
    facebook: str | None = None
    instagram: str | None = None
    linkedin: str | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "SocialLinks":
        payload = _as_mapping(payload)
        return cls(
            twitter=_pick(payload, "twitter", "x"),
            facebook=payload.get("facebook"),
            instagram=payload.get("instagram"),
            linkedin=payload.get("linkedin"),
        )


@dataclass(frozen=True)
class BusinessDetails:
    industry: str | None = None
    sector: str | None = None
    legal_form: str | None = None
    founded: str | None = None
    dissolved: str | None = None
    employee_count: int | str | None = None
    headquarters: str | None = None
    parent_company: str | None = None
    ceo: str | None = None
    stock_symbol: str | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "BusinessDetails":
        payload = _as_mapping(payload)
        return cls(
            industry=payload.get("industry"),
            sector=payload.get("sector"),
            legal_form=_pick(payload, "legal_form", "legalForm"),
            founded=_pick(payload, "founded", "foundedDate"),
            dissolved=_pick(payload, "dissolved", "dissolvedDate"),
            employee_count=_pick(payload, "employee_count", "employeeCount"),
            headquarters=payload.get("headquarters"),
            parent_company=_pick(payload, "parent_company", "parentCompany"),
            ceo=payload.get("ceo"),
            stock_symbol=_pick(payload, "stock_symbol", "stockSymbol"),
        )


@dataclass(frozen=True)
class LlmEnhanced:
    extracted_entities: tuple[str, ...] = ()
    business_category: str | None = None
    confidence: float | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "LlmEnhanced":
        payload = _as_mapping(payload)
        entities = _pick(payload, "extracted_entities", "extractedEntities") or ()
        return cls(
            extracted_entities=tuple(str(item) for item in entities),
            business_category=_pick(payload, "business_category", "businessCategory"),
            confidence=_as_float(payload.get("confidence")),
        )


@dataclass(frozen=True)
class CrawledData:
    name: str | None = None
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    founded: str | None = None
    location: Location | None = None
    social_links: SocialLinks = field(default_factory=SocialLinks)
    business_details: BusinessDetails = field(default_factory=BusinessDetails)
    llm_enhanced: LlmEnhanced = field(default_factory=LlmEnhanced)
    source_url: str | None = None
    page_title: str | None = None
    crawled_at: str | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "CrawledData":
        payload = _as_mapping(payload)
        return cls(
            name=payload.get("name"),
            description=payload.get("description"),
            phone=payload.get("phone"),
            email=payload.get("email"),
            address=payload.get("address"),
            founded=payload.get("founded"),
            location=Location.from_dict(payload.get("location")),
            social_links=SocialLinks.from_dict(_pick(payload, "social_links", "socialLinks", "social")),
            business_details=BusinessDetails.from_dict(_pick(payload, "business_details", "businessDetails")),
            llm_enhanced=LlmEnhanced.from_dict(_pick(payload, "llm_enhanced", "llmEnhanced")),
            source_url=_pick(payload, "source_url", "sourceUrl", "url"),
            page_title=_pick(payload, "page_title", "pageTitle", "title"),
            crawled_at=_pick(payload, "crawled_at", "crawledAt", "lastCrawledAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BusinessRecord:
    business_id: str
    name: str | None = None
    url: str | None = None
    category: str | None = None
    location: Location | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "BusinessRecord":
        business_id = _pick(payload, "business_id", "businessId", "id")
        return cls(
            business_id=str(business_id) if business_id is not None else "",
            name=payload.get("name"),
            url=_pick(payload, "url", "website"),
            category=payload.get("category"),
            location=Location.from_dict(payload.get("location")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TopReference:
    title: str | None = None
    url: str | None = None
    source: str | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TopReference":
        return cls(title=payload.get("title"), url=payload.get("url"), source=payload.get("source"))


@dataclass(frozen=True)
class NotabilityAssessment:
    is_notable: bool
    confidence: float = 0.0
    serious_reference_count: int = 0
    reasons: tuple[str, ...] = ()
    top_references: tuple[TopReference, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NotabilityAssessment":
        return cls(
            is_notable=bool(_pick(payload, "is_notable", "isNotable")),
            confidence=_as_float(payload.get("confidence")) or 0.0,
            serious_reference_count=int(_pick(payload, "serious_reference_count", "seriousReferenceCount") or 0),
            reasons=tuple(str(reason) for reason in payload.get("reasons") or ()),
            top_references=tuple(
                TopReference.from_dict(raw)
                for raw in _pick(payload, "top_references", "topReferences") or ()
                if isinstance(raw, dict)
            ),
        )
