import pytest

from label_verifier.config import MatcherThresholds, Settings
from label_verifier.errors import InsufficientLabelDataError
from label_verifier.orchestrator import VerificationOrchestrator
from label_verifier.schemas import ExtractedRecord


@pytest.fixture
def orchestrator(settings):
    return VerificationOrchestrator(settings)


def test_end_to_end_pass(orchestrator, declared, extracted):
    outcome = orchestrator.verify(declared, extracted)
    assert outcome.success is True
    fields = outcome.fields
    assert fields.brand_name.matched
    assert fields.product_type.matched
    assert fields.alcohol_content.matched
    assert fields.net_contents.matched
    assert fields.government_warning.matched


def test_brand_failure_still_reports_other_fields(orchestrator, declared, extracted):
    outcome = orchestrator.verify(declared, extracted.model_copy(update={"brand_name": "ABC Winery"}))
    assert outcome.success is False
    assert not outcome.fields.brand_name.matched
    assert outcome.fields.product_type.matched
    assert outcome.fields.alcohol_content.matched
    assert outcome.fields.net_contents.matched


@pytest.mark.parametrize("has_warning", [True, False])
def test_government_warning_never_changes_success(orchestrator, declared, extracted, has_warning):
    record = extracted.model_copy(update={"has_warning_statement": has_warning})
    outcome = orchestrator.verify(declared, record)
    assert outcome.success is True
    assert outcome.fields.government_warning.matched is has_warning


def test_government_warning_does_not_rescue_failure(orchestrator, declared, extracted):
    with_warning = orchestrator.verify(declared, extracted.model_copy(update={"net_contents": "1 L"}))
    without_warning = orchestrator.verify(
        declared,
        extracted.model_copy(update={"net_contents": "1 L", "has_warning_statement": False}),
    )
    assert with_warning.success is without_warning.success is False


def test_aborts_when_two_critical_fields_missing(orchestrator, declared):
    record = ExtractedRecord(brand_name=None, product_description=None, alcohol_content=42)
    with pytest.raises(InsufficientLabelDataError) as excinfo:
        orchestrator.verify(declared, record)
    assert excinfo.value.missing_fields == ("brand_name", "product_description")


@pytest.mark.parametrize("record", [None, ExtractedRecord()])
def test_aborts_on_empty_extraction(orchestrator, declared, record):
    with pytest.raises(InsufficientLabelDataError):
        orchestrator.verify(declared, record)


def test_one_missing_field_does_not_abort(orchestrator, declared, extracted):
    outcome = orchestrator.verify(declared, extracted.model_copy(update={"brand_name": None}))
    assert outcome.success is False
    assert not outcome.fields.brand_name.matched
    assert "not found" in outcome.fields.brand_name.error_message


def test_zero_abv_counts_as_present(orchestrator, declared):
    record = ExtractedRecord(product_description="Red Table Wine", alcohol_content=0.0)
    outcome = orchestrator.verify(declared, record)
    assert outcome.fields.alcohol_content.found_display == "0%"


def test_blank_strings_count_as_missing(orchestrator, declared):
    record = ExtractedRecord(brand_name="  ", product_description="", alcohol_content=12.5)
    with pytest.raises(InsufficientLabelDataError):
        orchestrator.verify(declared, record)


def test_abort_threshold_is_configurable(declared):
    settings = Settings(matcher_thresholds=MatcherThresholds(min_missing_for_abort=3))
    record = ExtractedRecord(alcohol_content=12.5)
    outcome = VerificationOrchestrator(settings).verify(declared, record)
    assert outcome.success is False


def test_rejects_untyped_records(orchestrator, declared):
    with pytest.raises(TypeError):
        orchestrator.verify(declared, {"brand_name": "XYZ Winery"})


def test_outcome_serializes_with_camel_case_keys(orchestrator, declared, extracted):
    dumped = orchestrator.verify(declared, extracted).model_dump(by_alias=True)
    assert set(dumped) == {"success", "fields"}
    assert set(dumped["fields"]) == {
        "brandName",
        "productType",
        "alcoholContent",
        "netContents",
        "governmentWarning",
    }
    assert set(dumped["fields"]["brandName"]) == {
        "matched",
        "expectedDisplay",
        "foundDisplay",
        "similarityScore",
        "errorMessage",
    }
