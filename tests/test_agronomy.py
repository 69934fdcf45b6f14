# tests/test_agronomy.py

from datetime import datetime, timedelta, timezone

import pytest

from core import agronomy


def test_diagnosis_is_stable_for_the_same_input():
    first = agronomy.diagnose_crop_disease("The lower leaves show Yellow Leaves and wilting", "Rice")
    second = agronomy.diagnose_crop_disease("The lower leaves show Yellow Leaves and wilting", "Rice")

    assert first == second
    assert first["disease"] == "Bacterial Leaf Blight"


def test_diagnosis_fallbacks():
    assert agronomy.diagnose_crop_disease("brown spots", "cotton") == agronomy.UNKNOWN_CROP_DIAGNOSIS
    assert agronomy.diagnose_crop_disease("holes in leaves", "wheat") == agronomy.UNRECOGNIZED_SYMPTOMS_DIAGNOSIS


@pytest.mark.parametrize(
    "current, expected",
    [
        (111, agronomy.TREND_UPWARD),
        (89, agronomy.TREND_DOWNWARD),
        (100, agronomy.TREND_STABLE),
    ],
)
def test_market_trend_thresholds(current, expected):
    assert agronomy.predict_market_trend([100, 100, 100], current) == expected


def test_market_trend_uses_only_the_three_most_recent_prices():
    # Older prices beyond the third are ignored
    assert agronomy.predict_market_trend([100, 100, 100, 500, 500], 100) == agronomy.TREND_STABLE


def test_market_trend_needs_three_prices():
    assert agronomy.predict_market_trend([100, 100], 150) == agronomy.TREND_INSUFFICIENT


def test_parse_price():
    assert agronomy.parse_price("₹2,500 per quintal") == 2500


def test_harvest_on_the_expected_day():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    result = agronomy.project_harvest("wheat", now - timedelta(days=130), now=now)

    assert result["days_to_harvest"] == 0
    assert result["harvest_readiness"] == "Ready for harvest"


def test_harvest_overdue_is_clamped_to_zero():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    result = agronomy.project_harvest("rice", now - timedelta(days=130), now=now)

    assert result["days_to_harvest"] == 0
    assert result["harvest_readiness"] == "Ready for harvest"
    assert result["current_growth_stage"] == "Harvest ready"


def test_harvest_soon_and_default_planting_date():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    soon = agronomy.project_harvest("rice", now - timedelta(days=110), now=now)
    default = agronomy.project_harvest("millet", now=now)

    assert soon["days_to_harvest"] == 10
    assert soon["harvest_readiness"] == "Harvest soon"
    assert default["planting_date"] == "2025-04-02"
    assert default["days_to_harvest"] == 40
    assert default["current_growth_stage"] == "Unknown crop"


def test_soil_health():
    result = agronomy.assess_soil_health("Clay", 5.5, 1.0)

    assert result["pH_status"] == "Acidic"
    assert result["organic_matter_level"] == "Low"
    assert "Apply lime to increase pH" in result["recommendations"]


def test_water_requirement_adjusts_for_heat_and_sandy_soil():
    hot = {"temperature": "32°C", "humidity": "40%"}
    mild = {"temperature": "25°C", "humidity": "70%"}

    assert agronomy.calculate_water_requirement("unknown", "vegetative", mild, "loamy") == 5
    assert agronomy.calculate_water_requirement("unknown", "vegetative", hot, "sandy") == 9
