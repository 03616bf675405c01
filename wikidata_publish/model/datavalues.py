"""Wikibase datavalues and snaks.

A datavalue is a closed tagged union of six shapes. Each shape is its own frozen
dataclass carrying a ``type_tag`` class attribute; ``to_dict`` renders the exact
``{"value": ..., "type": ...}`` wire form and ``datavalue_from_dict`` dispatches on the
tag when reading it back. Invalid values raise ``ContractError`` at construction, so a
malformed datavalue can never reach the Action API.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from wikidata_publish.common.constants import EARTH_GLOBE, GREGORIAN_CALENDAR
from wikidata_publish.common.errors import ContractError

PID_RE = re.compile(r"^P\d+$")
QID_RE = re.compile(r"^Q\d+$")
_ENTITY_ID_RE = re.compile(r"^([QP])(\d+)$")
_TIME_RE = re.compile(r"^[+-]\d{1,16}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")
_AMOUNT_RE = re.compile(r"^[+-]\d+(\.\d+)?$")
_UNIT_RE = re.compile(r"^(1|https?://[^\s]+/entity/Q\d+)$")

SNAK_TYPES = ("value", "novalue", "somevalue")


def require_pid(value: str, ctx: str = "property") -> str:
    if not isinstance(value, str) or not PID_RE.match(value):
        raise ContractError(f"Invalid property id for {ctx}: {value!r}")
    return value


@dataclass(frozen=True)
class EntityIdValue:
    id: str
    entity_type: str = "item"
    numeric_id: int | None = None

    type_tag: ClassVar[str] = "wikibase-entityid"

    def __post_init__(self) -> None:
        match = _ENTITY_ID_RE.match(self.id) if isinstance(self.id, str) else None
        if match is None:
            raise ContractError(f"Invalid entity id: {self.id!r}")
        expected = "item" if match.group(1) == "Q" else "property"
        if self.entity_type != expected:
            raise ContractError(f"Entity id {self.id} does not match entity-type {self.entity_type!r}")
        if self.numeric_id is not None and self.numeric_id != int(match.group(2)):
            raise ContractError(f"numeric-id {self.numeric_id} does not match {self.id}")

    def value_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"entity-type": self.entity_type, "id": self.id}
        if self.numeric_id is not None:
            out["numeric-id"] = self.numeric_id
        return out

    @classmethod
    def from_value(cls, value: dict[str, Any]) -> "EntityIdValue":
        entity_type = value.get("entity-type", "item")
        entity_id = value.get("id")
        numeric_id = value.get("numeric-id")
        if entity_id is None and numeric_id is not None:
            entity_id = f"{'Q' if entity_type == 'item' else 'P'}{numeric_id}"
        return cls(id=entity_id, entity_type=entity_type, numeric_id=numeric_id)


@dataclass(frozen=True)
class StringValue:
    value: str

    type_tag: ClassVar[str] = "string"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ContractError("String datavalue must be a non-blank string")

    def value_dict(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: str) -> "StringValue":
        return cls(value=value)


@dataclass(frozen=True)
class TimeValue:
    time: str
    precision: int = 11
    timezone: int = 0
    before: int = 0
    after: int = 0
    calendarmodel: str = GREGORIAN_CALENDAR

    type_tag: ClassVar[str] = "time"

    def __post_init__(self) -> None:
        if not isinstance(self.time, str) or not _TIME_RE.match(self.time):
            raise ContractError(f"Invalid time string: {self.time!r}")
        if isinstance(self.precision, bool) or not isinstance(self.precision, int) or not 0 <= self.precision <= 14:
            raise ContractError(f"Time precision must be an integer 0-14, got {self.precision!r}")

    def value_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "timezone": self.timezone,
            "before": self.before,
            "after": self.after,
            "precision": self.precision,
            "calendarmodel": self.calendarmodel,
        }

    @classmethod
    def from_value(cls, value: dict[str, Any]) -> "TimeValue":
        return cls(
            time=value.get("time"),
            precision=value.get("precision", 11),
            timezone=value.get("timezone", 0),
            before=value.get("before", 0),
            after=value.get("after", 0),
            calendarmodel=value.get("calendarmodel", GREGORIAN_CALENDAR),
        )


@dataclass(frozen=True)
class QuantityValue:
    amount: str
    unit: str = "1"
    upper_bound: str | None = None
    lower_bound: str | None = None

    type_tag: ClassVar[str] = "quantity"

    def __post_init__(self) -> None:
        for name in ("amount", "upper_bound", "lower_bound"):
            raw = getattr(self, name)
            if raw is None and name != "amount":
                continue
            if not isinstance(raw, str) or not _AMOUNT_RE.match(raw):
                raise ContractError(f"Quantity {name} must be a signed decimal string, got {raw!r}")
        if not isinstance(self.unit, str) or not _UNIT_RE.match(self.unit):
            raise ContractError(f"Quantity unit must be '1' or an entity URI, got {self.unit!r}")
        amount = float(self.amount)
        if self.lower_bound is not None and float(self.lower_bound) > amount:
            raise ContractError("Quantity lowerBound exceeds amount")
        if self.upper_bound is not None and float(self.upper_bound) < amount:
            raise ContractError("Quantity upperBound is below amount")

    def value_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"amount": self.amount, "unit": self.unit}
        if self.upper_bound is not None:
            out["upperBound"] = self.upper_bound
        if self.lower_bound is not None:
            out["lowerBound"] = self.lower_bound
        return out

    @classmethod
    def from_value(cls, value: dict[str, Any]) -> "QuantityValue":
        return cls(
            amount=value.get("amount"),
            unit=value.get("unit", "1"),
            upper_bound=value.get("upperBound"),
            lower_bound=value.get("lowerBound"),
        )


@dataclass(frozen=True)
class MonolingualTextValue:
    text: str
    language: str

    type_tag: ClassVar[str] = "monolingualtext"

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ContractError("Monolingual text must be a non-blank string")
        if not isinstance(self.language, str) or not self.language:
            raise ContractError("Monolingual text requires a language code")

    def value_dict(self) -> dict[str, Any]:
        return {"text": self.text, "language": self.language}

    @classmethod
    def from_value(cls, value: dict[str, Any]) -> "MonolingualTextValue":
        return cls(text=value.get("text"), language=value.get("language"))


@dataclass(frozen=True)
class GlobeCoordinateValue:
    latitude: float
    longitude: float
    precision: float
    globe: str = EARTH_GLOBE
    altitude: float | None = None

    type_tag: ClassVar[str] = "globecoordinate"

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ContractError(f"Latitude out of range: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ContractError(f"Longitude out of range: {self.longitude}")
        if self.precision <= 0:
            raise ContractError(f"Coordinate precision must be positive, got {self.precision}")

    def value_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "precision": self.precision,
            "globe": self.globe,
        }
        if self.altitude is not None:
            out["altitude"] = self.altitude
        return out

    @classmethod
    def from_value(cls, value: dict[str, Any]) -> "GlobeCoordinateValue":
        return cls(
            latitude=float(value["latitude"]),
            longitude=float(value["longitude"]),
            precision=float(value["precision"]),
            globe=value.get("globe", EARTH_GLOBE),
            altitude=value.get("altitude"),
        )


Datavalue = Union[
    EntityIdValue,
    StringValue,
    TimeValue,
    QuantityValue,
    MonolingualTextValue,
    GlobeCoordinateValue,
]

DATAVALUE_TYPES: dict[str, type] = {
    cls.type_tag: cls
    for cls in (
        EntityIdValue,
        StringValue,
        TimeValue,
        QuantityValue,
        MonolingualTextValue,
        GlobeCoordinateValue,
    )
}


def datavalue_to_dict(datavalue: Datavalue) -> dict[str, Any]:
    return {"value": datavalue.value_dict(), "type": datavalue.type_tag}


def datavalue_from_dict(payload: dict[str, Any]) -> Datavalue:
    tag = payload.get("type")
    cls = DATAVALUE_TYPES.get(tag)
    if cls is None:
        raise ContractError(f"Unknown datavalue type: {tag!r}")
    if "value" not in payload:
        raise ContractError(f"Datavalue of type {tag} has no value")
    try:
        return cls.from_value(payload["value"])
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ContractError(f"Malformed {tag} datavalue: {payload['value']!r}") from exc


@dataclass(frozen=True)
class Snak:
    property: str
    snaktype: str = "value"
    datavalue: Datavalue | None = None
    hash: str | None = None

    def __post_init__(self) -> None:
        require_pid(self.property, "snak")
        if self.snaktype not in SNAK_TYPES:
            raise ContractError(f"Invalid snaktype: {self.snaktype!r}")
        if (self.snaktype == "value") != (self.datavalue is not None):
            raise ContractError(f"Snak {self.property}: datavalue must be present iff snaktype is 'value'")
        if self.datavalue is not None and not isinstance(self.datavalue, tuple(DATAVALUE_TYPES.values())):
            raise ContractError(f"Snak {self.property}: unsupported datavalue {type(self.datavalue).__name__}")

    @classmethod
    def value(cls, pid: str, datavalue: Datavalue) -> "Snak":
        return cls(property=pid, snaktype="value", datavalue=datavalue)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"snaktype": self.snaktype, "property": self.property}
        if self.datavalue is not None:
            out["datavalue"] = datavalue_to_dict(self.datavalue)
        if self.hash is not None:
            out["hash"] = self.hash
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Snak":
        raw_datavalue = payload.get("datavalue")
        return cls(
            property=payload.get("property"),
            snaktype=payload.get("snaktype", "value"),
            datavalue=datavalue_from_dict(raw_datavalue) if raw_datavalue is not None else None,
            hash=payload.get("hash"),
        )
