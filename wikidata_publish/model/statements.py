"""Claims (statements) and their references."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from wikidata_publish.common.errors import ContractError
from wikidata_publish.model.datavalues import Snak, require_pid

RANKS = ("preferred", "normal", "deprecated")


def _snak_map_to_dict(snaks: dict[str, tuple[Snak, ...]]) -> dict[str, list[dict[str, Any]]]:
    return {pid: [snak.to_dict() for snak in group] for pid, group in snaks.items()}


def _snak_map_from_dict(payload: dict[str, Any] | None) -> dict[str, tuple[Snak, ...]]:
    return {pid: tuple(Snak.from_dict(raw) for raw in group) for pid, group in (payload or {}).items()}


def _check_snak_map(snaks: dict[str, tuple[Snak, ...]], ctx: str) -> None:
    for pid, group in snaks.items():
        require_pid(pid, ctx)
        if not group:
            raise ContractError(f"{ctx} {pid} has an empty snak list")
        for snak in group:
            if snak.property != pid:
                raise ContractError(f"{ctx} {pid} contains a snak for {snak.property}")


@dataclass(frozen=True)
class Reference:
    snaks: dict[str, tuple[Snak, ...]]
    hash: str | None = None

    def __post_init__(self) -> None:
        if not self.snaks:
            raise ContractError("Reference must contain at least one snak")
        _check_snak_map(self.snaks, "reference")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"snaks": _snak_map_to_dict(self.snaks)}
        if self.hash is not None:
            out["hash"] = self.hash
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Reference":
        return cls(snaks=_snak_map_from_dict(payload.get("snaks")), hash=payload.get("hash"))


@dataclass(frozen=True)
class Claim:
    mainsnak: Snak
    references: tuple[Reference, ...] = ()
    qualifiers: dict[str, tuple[Snak, ...]] = field(default_factory=dict)
    qualifiers_order: tuple[str, ...] = ()
    rank: str | None = None
    type: str = "statement"

    def __post_init__(self) -> None:
        if self.type != "statement":
            raise ContractError(f"Claim type must be 'statement', got {self.type!r}")
        if self.rank is not None and self.rank not in RANKS:
            raise ContractError(f"Invalid rank: {self.rank!r}")
        _check_snak_map(self.qualifiers, "qualifier")
        unknown = set(self.qualifiers_order) - set(self.qualifiers)
        if unknown:
            raise ContractError(f"qualifiersOrder names unknown qualifiers: {', '.join(sorted(unknown))}")

    @property
    def property(self) -> str:
        return self.mainsnak.property

    def has_references(self) -> bool:
        return len(self.references) > 0

    def without_references(self) -> "Claim":
        return Claim(
            mainsnak=self.mainsnak,
            qualifiers=self.qualifiers,
            qualifiers_order=self.qualifiers_order,
            rank=self.rank,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"mainsnak": self.mainsnak.to_dict(), "type": self.type}
        if self.rank is not None:
            out["rank"] = self.rank
        if self.qualifiers:
            out["qualifiers"] = _snak_map_to_dict(self.qualifiers)
            out["qualifiers-order"] = list(self.qualifiers_order or self.qualifiers)
        if self.references:
            out["references"] = [reference.to_dict() for reference in self.references]
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Claim":
        if "mainsnak" not in payload:
            raise ContractError("Claim has no mainsnak")
        return cls(
            mainsnak=Snak.from_dict(payload["mainsnak"]),
            references=tuple(Reference.from_dict(raw) for raw in payload.get("references") or ()),
            qualifiers=_snak_map_from_dict(payload.get("qualifiers")),
            qualifiers_order=tuple(payload.get("qualifiers-order") or payload.get("qualifiersOrder") or ()),
            rank=payload.get("rank"),
            type=payload.get("type", "statement"),
        )
