from wikidata_publish.assembly.assembler import assemble
from wikidata_publish.gate.notability import NotabilityResult, validate
from wikidata_publish.model.inputs import BusinessRecord, CrawledData, Location, NotabilityAssessment


def _notable_entity():
    record = BusinessRecord(
        business_id="biz-1",
        name="Acme Coffee Roasters",
        url="https://acmecoffee.com",
        location=Location(city="San Francisco", state="CA", latitude=37.7749, longitude=-122.4194),
    )
    crawled = CrawledData(
        name="Acme Coffee Roasters Inc.",
        description="Premium artisanal coffee roaster...",
        phone="+1-415-555-0123",
    )
    return assemble(record, crawled)


def test_acme_entity_is_notable():
    result = validate(_notable_entity())
    assert result == NotabilityResult(is_notable=True, reasons=())
    assert result.to_dict() == {"isNotable": True, "reasons": []}


def test_stripping_references_rejects_with_single_reason():
    result = validate(_notable_entity().without_references())
    assert result.is_notable is False
    assert result.reasons == ("No references provided",)


def test_too_few_properties_reports_the_count():
    entity = _notable_entity()
    keep = {"P31", "P1448"}
    reduced = entity.without_properties(*(pid for pid in entity.claims if pid not in keep))
    result = validate(reduced)
    assert result.is_notable is False
    assert result.reasons == ("Only 2 properties (minimum 3 required)",)


def test_missing_instance_of():
    result = validate(_notable_entity().without_properties("P31"))
    assert result.is_notable is False
    assert result.reasons == ('Missing "instance of" (P31) property',)


def test_rules_are_independent_and_all_reported():
    entity = _notable_entity()
    reduced = entity.without_properties(*(pid for pid in entity.claims if pid != "P856"))
    result = validate(reduced)
    assert result.reasons == (
        "No references provided",
        "Only 1 properties (minimum 3 required)",
        'Missing "instance of" (P31) property',
    )


def test_external_rejection_supersedes_structural_pass():
    external = NotabilityAssessment(is_notable=False, confidence=0.2, reasons=("No independent coverage",))
    result = validate(_notable_entity(), external)
    assert result.is_notable is False
    assert result.reasons == ("External notability assessment rejected the entity", "No independent coverage")


def test_external_approval_does_not_override_structural_failures():
    external = NotabilityAssessment(is_notable=True, confidence=0.9)
    result = validate(_notable_entity().without_references(), external)
    assert result.reasons == ("No references provided",)


def test_validate_is_idempotent():
    entity = _notable_entity()
    assert validate(entity) == validate(entity)
