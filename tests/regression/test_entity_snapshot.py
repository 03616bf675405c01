from __future__ import annotations

import pytest

from wikidata_publish.assembly.assembler import assemble
from wikidata_publish.model.inputs import BusinessRecord, CrawledData

REFERENCE = {
    "snaks": {
        "P854": [
            {
                "snaktype": "value",
                "property": "P854",
                "datavalue": {"value": "https://acmecoffee.com", "type": "string"},
            }
        ],
        "P813": [
            {
                "snaktype": "value",
                "property": "P813",
                "datavalue": {
                    "value": {
                        "time": "+2024-05-01T00:00:00Z",
                        "timezone": 0,
                        "before": 0,
                        "after": 0,
                        "precision": 11,
                        "calendarmodel": "http://www.wikidata.org/entity/Q1985727",
                    },
                    "type": "time",
                },
            }
        ],
    }
}


def _claim(pid: str, datavalue: dict, referenced: bool = True) -> list[dict]:
    claim = {
        "mainsnak": {"snaktype": "value", "property": pid, "datavalue": datavalue},
        "type": "statement",
    }
    if referenced:
        claim["references"] = [REFERENCE]
    return [claim]


EXPECTED = {
    "labels": {"en": {"language": "en", "value": "Acme Coffee Roasters Inc."}},
    "descriptions": {"en": {"language": "en", "value": "Premium artisanal coffee roaster..."}},
    "claims": {
        "P31": _claim("P31", {"value": {"entity-type": "item", "id": "Q4830453"}, "type": "wikibase-entityid"}),
        "P856": _claim("P856", {"value": "https://acmecoffee.com", "type": "string"}, referenced=False),
        "P1448": _claim("P1448", {"value": "Acme Coffee Roasters Inc.", "type": "string"}),
        "P625": _claim(
            "P625",
            {
                "value": {
                    "latitude": 37.7749,
                    "longitude": -122.4194,
                    "precision": 0.0001,
                    "globe": "http://www.wikidata.org/entity/Q2",
                },
                "type": "globecoordinate",
            },
        ),
        "P1329": _claim("P1329", {"value": "+1-415-555-0123", "type": "string"}),
    },
}


def _acme():
    record = BusinessRecord.from_dict(
        {
            "id": "acme",
            "name": "Acme Coffee Roasters",
            "url": "https://acmecoffee.com",
            "location": {"city": "San Francisco", "state": "CA", "lat": 37.7749, "lng": -122.4194},
        }
    )
    crawled = CrawledData.from_dict(
        {
            "name": "Acme Coffee Roasters Inc.",
            "description": "Premium artisanal coffee roaster...",
            "phone": "+1-415-555-0123",
            "crawledAt": "2024-05-01T10:00:00Z",
        }
    )
    return record, crawled


@pytest.mark.regression
def test_acme_entity_matches_snapshot():
    record, crawled = _acme()
    entity = assemble(record, crawled)
    assert entity.to_dict() == EXPECTED
    assert list(entity.to_dict()["claims"]) == ["P31", "P856", "P1448", "P625", "P1329"]


@pytest.mark.regression
def test_serialised_entity_is_byte_stable_across_calls():
    record, crawled = _acme()
    assert assemble(record, crawled).to_json() == assemble(record, crawled).to_json()
