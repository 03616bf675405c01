import json

import pytest

from wikidata_publish.common.errors import ContractError
from wikidata_publish.model.datavalues import EntityIdValue, Snak, StringValue, TimeValue
from wikidata_publish.model.entity import Term, WikidataEntity, check_entity_contract
from wikidata_publish.model.statements import Claim, Reference


def _reference() -> Reference:
    return Reference(snaks={"P854": (Snak.value("P854", StringValue("https://acmecoffee.com")),)})


def _entity(**claims) -> WikidataEntity:
    return WikidataEntity(
        labels={"en": Term("en", "Acme")},
        descriptions={"en": Term("en", "Local business")},
        claims=claims,
    )


def test_claim_wire_form_with_qualifiers_and_references():
    claim = Claim(
        mainsnak=Snak.value("P1128", StringValue("x")),
        references=(_reference(),),
        qualifiers={"P585": (Snak.value("P585", TimeValue(time="+2024-05-01T00:00:00Z")),)},
        qualifiers_order=("P585",),
    )
    out = claim.to_dict()
    assert out["type"] == "statement"
    assert out["qualifiers-order"] == ["P585"]
    assert out["references"][0]["snaks"]["P854"][0]["datavalue"]["value"] == "https://acmecoffee.com"
    assert "rank" not in out


def test_claim_reads_either_qualifier_order_key():
    raw = {
        "mainsnak": {"snaktype": "value", "property": "P31", "datavalue": {"value": {"entity-type": "item", "id": "Q5"}, "type": "wikibase-entityid"}},
        "type": "statement",
        "qualifiers": {"P585": [{"snaktype": "novalue", "property": "P585"}]},
        "qualifiersOrder": ["P585"],
    }
    assert Claim.from_dict(raw).qualifiers_order == ("P585",)


def test_claim_rejects_bad_rank_and_unknown_qualifier_order():
    snak = Snak.value("P31", EntityIdValue(id="Q5"))
    with pytest.raises(ContractError):
        Claim(mainsnak=snak, rank="best")
    with pytest.raises(ContractError):
        Claim(mainsnak=snak, qualifiers_order=("P585",))


def test_reference_must_not_be_empty():
    with pytest.raises(ContractError):
        Reference(snaks={})


def test_entity_requires_a_label():
    with pytest.raises(ContractError):
        WikidataEntity(labels={}, descriptions={}, claims={})


def test_entity_rejects_claims_under_the_wrong_key():
    claim = Claim(mainsnak=Snak.value("P31", EntityIdValue(id="Q5")))
    with pytest.raises(ContractError):
        _entity(P17=(claim,))


def test_entity_rejects_overlong_description():
    with pytest.raises(ContractError):
        WikidataEntity(labels={"en": Term("en", "Acme")}, descriptions={"en": Term("en", "x" * 251)}, claims={})


def test_entity_json_preserves_claim_order_and_is_compact():
    entity = _entity(
        P31=(Claim(mainsnak=Snak.value("P31", EntityIdValue(id="Q4830453")), references=(_reference(),)),),
        P1329=(Claim(mainsnak=Snak.value("P1329", StringValue("+1 415 555 0123"))),),
    )
    text = entity.to_json()
    assert ": " not in text
    assert list(json.loads(text)["claims"]) == ["P31", "P1329"]
    assert WikidataEntity.from_dict(json.loads(text)) == entity


def test_without_references_strips_every_claim():
    entity = _entity(
        P31=(Claim(mainsnak=Snak.value("P31", EntityIdValue(id="Q4830453")), references=(_reference(),)),),
    )
    stripped = entity.without_references()
    assert not any(claim.has_references() for group in stripped.claims.values() for claim in group)
    assert entity.claims["P31"][0].has_references()


def test_check_entity_contract_passes_valid_entity():
    check_entity_contract(_entity())
