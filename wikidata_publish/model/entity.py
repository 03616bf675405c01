"""The Wikibase item entity and its wire (de)serialisation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from wikidata_publish.common.constants import MAX_TERM_LENGTH
from wikidata_publish.common.errors import ContractError
from wikidata_publish.common.text import utf16_length
from wikidata_publish.model.datavalues import require_pid
from wikidata_publish.model.statements import Claim


@dataclass(frozen=True)
class Term:
    language: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"language": self.language, "value": self.value}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Term":
        return cls(language=payload.get("language"), value=payload.get("value"))


def _check_terms(terms: dict[str, Term], ctx: str) -> list[str]:
    problems: list[str] = []
    for code, term in terms.items():
        if term.language != code:
            problems.append(f"{ctx} key {code!r} holds a term in {term.language!r}")
        if not isinstance(term.value, str) or not term.value.strip():
            problems.append(f"{ctx} {code!r} is blank")
        elif utf16_length(term.value) > MAX_TERM_LENGTH:
            problems.append(f"{ctx} {code!r} exceeds {MAX_TERM_LENGTH} UTF-16 code units")
    return problems


def contract_violations(entity: "WikidataEntity") -> list[str]:
    problems: list[str] = []
    if not entity.labels:
        problems.append("entity has no labels")
    problems.extend(_check_terms(entity.labels, "label"))
    problems.extend(_check_terms(entity.descriptions, "description"))
    for pid, claims in entity.claims.items():
        try:
            require_pid(pid, "claims key")
        except ContractError as exc:
            problems.append(str(exc))
            continue
        if not claims:
            problems.append(f"claims {pid} is an empty list")
        for claim in claims:
            if claim.property != pid:
                problems.append(f"claims {pid} holds a statement for {claim.property}")
    return problems


def check_entity_contract(entity: "WikidataEntity") -> None:
    problems = contract_violations(entity)
    if problems:
        raise ContractError("; ".join(problems))


@dataclass(frozen=True)
class WikidataEntity:
    labels: dict[str, Term]
    descriptions: dict[str, Term]
    claims: dict[str, tuple[Claim, ...]]

    def __post_init__(self) -> None:
        check_entity_contract(self)

    def property_ids(self) -> list[str]:
        return list(self.claims)

    def without_references(self) -> "WikidataEntity":
        return WikidataEntity(
            labels=dict(self.labels),
            descriptions=dict(self.descriptions),
            claims={pid: tuple(claim.without_references() for claim in group) for pid, group in self.claims.items()},
        )

    def without_properties(self, *pids: str) -> "WikidataEntity":
        return WikidataEntity(
            labels=dict(self.labels),
            descriptions=dict(self.descriptions),
            claims={pid: group for pid, group in self.claims.items() if pid not in pids},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "labels": {code: term.to_dict() for code, term in self.labels.items()},
            "descriptions": {code: term.to_dict() for code, term in self.descriptions.items()},
            "claims": {pid: [claim.to_dict() for claim in group] for pid, group in self.claims.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "WikidataEntity":
        return cls(
            labels={code: Term.from_dict(raw) for code, raw in (payload.get("labels") or {}).items()},
            descriptions={code: Term.from_dict(raw) for code, raw in (payload.get("descriptions") or {}).items()},
            claims={
                pid: tuple(Claim.from_dict(raw) for raw in group)
                for pid, group in (payload.get("claims") or {}).items()
            },
        )
