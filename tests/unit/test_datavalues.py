import pytest

from wikidata_publish.common.errors import ContractError
from wikidata_publish.model.datavalues import (
    EntityIdValue,
    GlobeCoordinateValue,
    MonolingualTextValue,
    QuantityValue,
    Snak,
    StringValue,
    TimeValue,
    datavalue_from_dict,
    datavalue_to_dict,
)


def test_entity_id_wire_shape():
    assert datavalue_to_dict(EntityIdValue(id="Q4830453")) == {
        "value": {"entity-type": "item", "id": "Q4830453"},
        "type": "wikibase-entityid",
    }
    assert EntityIdValue(id="Q5", numeric_id=5).value_dict()["numeric-id"] == 5


def test_entity_id_rejects_mismatched_type_and_bad_ids():
    with pytest.raises(ContractError):
        EntityIdValue(id="P31", entity_type="item")
    with pytest.raises(ContractError):
        EntityIdValue(id="Q12", numeric_id=13)
    with pytest.raises(ContractError):
        EntityIdValue(id="business")


def test_entity_id_from_numeric_id_only():
    value = datavalue_from_dict({"value": {"entity-type": "item", "numeric-id": 62}, "type": "wikibase-entityid"})
    assert value == EntityIdValue(id="Q62", numeric_id=62)


def test_string_value_is_raw_string_and_never_blank():
    assert datavalue_to_dict(StringValue("+1-415-555-0123")) == {"value": "+1-415-555-0123", "type": "string"}
    with pytest.raises(ContractError):
        StringValue("   ")


def test_time_value_wire_shape_and_validation():
    value = TimeValue(time="+2010-00-00T00:00:00Z", precision=9)
    assert datavalue_to_dict(value) == {
        "value": {
            "time": "+2010-00-00T00:00:00Z",
            "timezone": 0,
            "before": 0,
            "after": 0,
            "precision": 9,
            "calendarmodel": "http://www.wikidata.org/entity/Q1985727",
        },
        "type": "time",
    }
    with pytest.raises(ContractError):
        TimeValue(time="2010-01-01T00:00:00Z")
    with pytest.raises(ContractError):
        TimeValue(time="+2010-01-01T00:00:00Z", precision=15)


def test_quantity_bounds_and_unit():
    value = QuantityValue(amount="+10", upper_bound="+50", lower_bound="+10")
    assert value.value_dict() == {"amount": "+10", "unit": "1", "upperBound": "+50", "lowerBound": "+10"}
    with pytest.raises(ContractError):
        QuantityValue(amount="10")
    with pytest.raises(ContractError):
        QuantityValue(amount="+10", lower_bound="+20")
    with pytest.raises(ContractError):
        QuantityValue(amount="+10", unit="people")
    assert QuantityValue(amount="+3", unit="http://www.wikidata.org/entity/Q11573").unit.endswith("Q11573")


def test_monolingual_text_requires_language():
    assert MonolingualTextValue(text="1 Main St", language="en").value_dict() == {"text": "1 Main St", "language": "en"}
    with pytest.raises(ContractError):
        MonolingualTextValue(text="1 Main St", language="")


def test_globe_coordinate_range_checks():
    value = GlobeCoordinateValue(latitude=37.7749, longitude=-122.4194, precision=0.0001)
    assert value.value_dict()["globe"] == "http://www.wikidata.org/entity/Q2"
    assert "altitude" not in value.value_dict()
    with pytest.raises(ContractError):
        GlobeCoordinateValue(latitude=91, longitude=0, precision=0.0001)
    with pytest.raises(ContractError):
        GlobeCoordinateValue(latitude=0, longitude=-181, precision=0.0001)


def test_unknown_datavalue_tag_is_rejected():
    with pytest.raises(ContractError):
        datavalue_from_dict({"value": "x", "type": "url"})


def test_malformed_payload_becomes_contract_error():
    with pytest.raises(ContractError):
        datavalue_from_dict({"value": "not-a-dict", "type": "globecoordinate"})


def test_every_variant_parses_back_from_its_wire_form():
    values = [
        EntityIdValue(id="Q62"),
        StringValue("acme"),
        TimeValue(time="+2001-05-00T00:00:00Z", precision=10),
        QuantityValue(amount="+200", lower_bound="+200"),
        MonolingualTextValue(text="Acme", language="en"),
        GlobeCoordinateValue(latitude=1.5, longitude=2.5, precision=0.0001),
    ]
    for value in values:
        assert datavalue_from_dict(datavalue_to_dict(value)) == value


def test_snak_datavalue_presence_follows_snaktype():
    assert Snak(property="P576", snaktype="novalue").to_dict() == {"snaktype": "novalue", "property": "P576"}
    with pytest.raises(ContractError):
        Snak(property="P576", snaktype="value")
    with pytest.raises(ContractError):
        Snak(property="P576", snaktype="somevalue", datavalue=StringValue("x"))
    with pytest.raises(ContractError):
        Snak.value("31", StringValue("x"))
