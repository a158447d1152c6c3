import pytest

from label_verifier.config import MatcherThresholds
from label_verifier.schemas import ProductCategory
from label_verifier.verifiers import FieldVerifier, format_percent


@pytest.fixture
def verifier():
    return FieldVerifier(MatcherThresholds())


def test_brand_matches_after_normalization(verifier):
    result = verifier.verify_brand_name("XYZ Winery", "xyz  WINERY")
    assert result.matched
    assert result.similarity_score == 100
    assert result.error_message is None


def test_brand_has_no_fuzzy_tolerance(verifier):
    result = verifier.verify_brand_name("XYZ Winery", "XYZ Wineries")
    assert not result.matched
    assert result.found_display == "XYZ Wineries"
    assert "XYZ Winery" in result.error_message
    assert "XYZ Wineries" in result.error_message


def test_brand_not_found(verifier):
    result = verifier.verify_brand_name("XYZ Winery", None)
    assert not result.matched
    assert result.found_display is None
    assert "not found" in result.error_message


def test_product_type_matches_classified_description(verifier):
    result = verifier.verify_product_type(ProductCategory.wine, "Red Table Wine")
    assert result.matched
    assert result.expected_display == "Wine"
    assert result.similarity_score == 95


def test_product_type_mismatch_names_both_categories(verifier):
    result = verifier.verify_product_type(
        ProductCategory.distilled_spirits, "Red Table Wine"
    )
    assert not result.matched
    assert "Distilled Spirits" in result.error_message
    assert "Wine" in result.error_message


@pytest.mark.parametrize("description", [None, "Product of Italy"])
def test_product_type_undeterminable(verifier, description):
    result = verifier.verify_product_type(ProductCategory.wine, description)
    assert not result.matched
    assert "Could not determine product type" in result.error_message


def test_product_type_below_confidence_floor_is_undeterminable():
    strict = FieldVerifier(MatcherThresholds(category_confidence_floor=90))
    result = strict.verify_product_type(ProductCategory.distilled_spirits, "Bourbon Whiskey")
    assert not result.matched
    assert result.similarity_score == 89
    assert "Could not determine product type" in result.error_message


@pytest.mark.parametrize(
    "declared,found,matched",
    [
        (40.0, 40.0, True),
        (40.0, 40.5, True),
        (40.0, 39.5, True),
        (45.0, 45.25, True),
        (40.0, 41.0, False),
        (12.5, 13.25, False),
        (0.0, 0.0, True),
    ],
)
def test_alcohol_content_tolerance(verifier, declared, found, matched):
    assert verifier.verify_alcohol_content(declared, found).matched is matched


def test_alcohol_content_not_found(verifier):
    result = verifier.verify_alcohol_content(45.0, None)
    assert not result.matched
    assert result.expected_display == "45%"
    assert "not found" in result.error_message


def test_alcohol_content_mismatch_reports_reading(verifier):
    result = verifier.verify_alcohol_content(45.0, 40.0)
    assert not result.matched
    assert result.found_display == "40%"
    assert "40%" in result.error_message


@pytest.mark.parametrize(
    "candidates,expected",
    [
        ([5.0, 45.2, 45.0], 45.2),
        ([40.0, 43.0], 40.0),
        ([], None),
    ],
)
def test_select_alcohol_reading(verifier, candidates, expected):
    assert verifier.select_alcohol_reading(45.0, candidates) == expected


def test_select_alcohol_reading_follows_tolerance():
    strict = FieldVerifier(MatcherThresholds(abv_tolerance_percent=0.1))
    assert strict.select_alcohol_reading(45.0, [45.3, 45.05]) == 45.05


@pytest.mark.parametrize(
    "declared,found",
    [
        ("750 mL", "750ML"),
        ("750 mL", "750 milliliters"),
        ("12 fl oz", "12 FL. OZ."),
        ("1 Liter", "1L"),
        ("1 L", "1 L."),
        ("1 L", "1 Ltr."),
        ("50 mL", "50 mL."),
    ],
)
def test_net_contents_equivalent_spellings(verifier, declared, found):
    result = verifier.verify_net_contents(declared, found)
    assert result.matched
    assert result.similarity_score == 100


def test_net_contents_different_volume(verifier):
    result = verifier.verify_net_contents("750 mL", "1 L")
    assert not result.matched
    assert "1 L" in result.error_message


def test_net_contents_fuzzy_tolerance_follows_threshold():
    lenient = FieldVerifier(MatcherThresholds())
    strict = FieldVerifier(MatcherThresholds(fuzzy_match_threshold=90))
    lenient_result = lenient.verify_net_contents("750 mL", "750 mL-")
    assert lenient_result.matched
    assert lenient_result.similarity_score == 83
    assert not strict.verify_net_contents("750 mL", "750 mL-").matched


def test_net_contents_not_found(verifier):
    result = verifier.verify_net_contents("750 mL", None)
    assert not result.matched
    assert "not found" in result.error_message


def test_government_warning_presence(verifier):
    assert verifier.verify_government_warning(True).matched
    missing = verifier.verify_government_warning(False)
    assert not missing.matched
    assert missing.error_message


@pytest.mark.parametrize("value,display", [(45.0, "45%"), (12.5, "12.5%"), (0.0, "0%")])
def test_format_percent(value, display):
    assert format_percent(value) == display
