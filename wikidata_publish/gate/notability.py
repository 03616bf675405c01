"""Publish-eligibility rules for an assembled entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wikidata_publish.common.constants import MIN_PROPERTY_COUNT
from wikidata_publish.model.entity import WikidataEntity
from wikidata_publish.model.inputs import NotabilityAssessment

INSTANCE_OF_PID = "P31"
NO_REFERENCES_REASON = "No references provided"
MISSING_INSTANCE_OF_REASON = 'Missing "instance of" (P31) property'
EXTERNAL_REJECTION_REASON = "External notability assessment rejected the entity"


@dataclass(frozen=True)
class NotabilityResult:
    is_notable: bool
    reasons: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"isNotable": self.is_notable, "reasons": list(self.reasons)}


def too_few_properties_reason(count: int) -> str:
    return f"Only {count} properties (minimum {MIN_PROPERTY_COUNT} required)"


def validate(entity: WikidataEntity, external: NotabilityAssessment | None = None) -> NotabilityResult:
    """Evaluate every rule and collect all failure reasons; never raises."""
    reasons: list[str] = []

    has_references = any(claim.has_references() for group in entity.claims.values() for claim in group)
    if not has_references:
        reasons.append(NO_REFERENCES_REASON)

    property_count = len(entity.claims)
    if property_count < MIN_PROPERTY_COUNT:
        reasons.append(too_few_properties_reason(property_count))

    if INSTANCE_OF_PID not in entity.claims:
        reasons.append(MISSING_INSTANCE_OF_REASON)

    if external is not None and not external.is_notable:
        reasons.append(EXTERNAL_REJECTION_REASON)
        reasons.extend(reason for reason in external.reasons if reason)

    return NotabilityResult(is_notable=not reasons, reasons=tuple(reasons))
