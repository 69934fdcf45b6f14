# core/agronomy.py
"""
Deterministic farming computations used by the advisory handlers.
Every function here is pure: same input, same output, no store access.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

DISEASE_DATABASE = {
    "rice": {
        "yellow leaves": {
            "disease": "Bacterial Leaf Blight",
            "treatment": "Apply copper-based fungicide",
            "prevention": "Avoid overhead watering, ensure good drainage",
        },
        "brown spots": {
            "disease": "Rice Blast",
            "treatment": "Apply Tricyclazole fungicide",
            "prevention": "Balanced fertilization, avoid water stress",
        },
    },
    "wheat": {
        "rust colored spots": {
            "disease": "Wheat Rust",
            "treatment": "Apply Propiconazole fungicide",
            "prevention": "Use resistant varieties, proper spacing",
        },
        "powdery coating": {
            "disease": "Powdery Mildew",
            "treatment": "Apply sulfur-based fungicide",
            "prevention": "Ensure good air circulation",
        },
    },
    "tomato": {
        "yellowing leaves": {
            "disease": "Tomato Yellow Leaf Curl Virus",
            "treatment": "Remove affected plants, control whiteflies",
            "prevention": "Use virus-free seeds, control vectors",
        },
        "black spots": {
            "disease": "Early Blight",
            "treatment": "Apply Mancozeb fungicide",
            "prevention": "Crop rotation, proper spacing",
        },
    },
}

UNKNOWN_CROP_DIAGNOSIS = {
    "disease": "Unknown crop or disease",
    "treatment": "Consult local agricultural extension officer",
    "prevention": "Follow general crop management practices",
}

UNRECOGNIZED_SYMPTOMS_DIAGNOSIS = {
    "disease": "Symptoms not recognized",
    "treatment": "Send photos to agricultural expert for diagnosis",
    "prevention": "Maintain good field hygiene",
}

CROP_CALENDARS = {
    "rice": [("germination", 0, 10), ("vegetative", 10, 55), ("reproductive", 55, 85), ("maturity", 85, 120)],
    "wheat": [("germination", 0, 15), ("vegetative", 15, 70), ("reproductive", 70, 110), ("maturity", 110, 130)],
    "maize": [("germination", 0, 10), ("vegetative", 10, 60), ("reproductive", 60, 90), ("maturity", 90, 120)],
}

CROP_DURATIONS_DAYS = {"rice": 120, "wheat": 130, "maize": 120, "tomato": 80}
DEFAULT_CROP_DURATION_DAYS = 100
DEFAULT_PLANTING_AGE_DAYS = 60

# mm/day by growth stage
CROP_WATER_REQUIREMENTS = {
    "rice": {"vegetative": 8, "reproductive": 12, "maturity": 6},
    "wheat": {"vegetative": 4, "reproductive": 6, "maturity": 3},
    "maize": {"vegetative": 5, "reproductive": 8, "maturity": 4},
    "tomato": {"vegetative": 4, "reproductive": 6, "maturity": 3},
}
DEFAULT_WATER_REQUIREMENT = 5

SOIL_WATER_ADJUSTMENT = {"sandy": 1.3, "clay": 0.8, "loamy": 1.0, "silt": 0.9}

SOIL_SPECIFIC_ADVICE = {
    "clay": "Improve drainage, add organic matter to enhance structure",
    "sandy": "Increase water retention with organic matter",
    "loamy": "Maintain current soil structure with regular organic amendments",
    "silt": "Prevent compaction, improve drainage if needed",
}

GOVERNMENT_SCHEMES = {
    "subsidy": [
        {
            "name": "PM-KISAN",
            "eligibility": "All farmers",
            "benefit": "₹6,000 per year",
            "application": "Online or Common Service Centers",
        },
        {
            "name": "Fertilizer Subsidy",
            "eligibility": "All farmers",
            "benefit": "50% subsidy on fertilizers",
            "application": "Through authorized dealers",
        },
    ],
    "insurance": [
        {
            "name": "Pradhan Mantri Fasal Bima Yojana",
            "eligibility": "All farmers",
            "benefit": "Crop insurance coverage",
            "application": "Banks and insurance companies",
        },
    ],
    "loan": [
        {
            "name": "Kisan Credit Card",
            "eligibility": "Farmers with land documents",
            "benefit": "Low-interest agricultural loans",
            "application": "Banks and cooperative societies",
        },
    ],
    "technology": [
        {
            "name": "Sub-Mission on Agricultural Mechanization",
            "eligibility": "Small and marginal farmers",
            "benefit": "50% subsidy on agricultural machinery",
            "application": "State agriculture departments",
        },
    ],
}

TREND_UPWARD = "Upward trend - Good time to sell"
TREND_DOWNWARD = "Downward trend - Consider holding if storage available"
TREND_STABLE = "Stable prices - Neutral market"
TREND_INSUFFICIENT = "Insufficient data"


def diagnose_crop_disease(symptoms: str, crop: str) -> Dict[str, str]:
    """Looks up the crop, then the first known symptom phrase contained in the description."""
    crop_diseases = DISEASE_DATABASE.get(crop.lower())
    if not crop_diseases:
        return dict(UNKNOWN_CROP_DIAGNOSIS)

    described = symptoms.lower()
    for symptom_key, diagnosis in crop_diseases.items():
        if symptom_key.lower() in described:
            return dict(diagnosis)
    return dict(UNRECOGNIZED_SYMPTOMS_DIAGNOSIS)


def days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 86400


def crop_growth_stage(crop: str, planting_date: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    days_since_planting = math.floor(days_between(planting_date, now))
    calendar = CROP_CALENDARS.get(crop.lower())
    if calendar is None:
        return "Unknown crop"
    for stage, start, end in calendar:
        if start <= days_since_planting <= end:
            return stage
    return "Harvest ready"


def assess_soil_health(soil_type: str, ph: float, organic_matter: float) -> dict:
    recommendations = []
    if ph < 6.0:
        recommendations.append("Apply lime to increase pH")
    elif ph > 8.0:
        recommendations.append("Apply sulfur to decrease pH")
    if organic_matter < 2.0:
        recommendations.append("Add compost or organic matter")

    if ph < 6:
        ph_status = "Acidic"
    elif ph > 7:
        ph_status = "Alkaline"
    else:
        ph_status = "Neutral"

    if organic_matter < 2:
        organic_level = "Low"
    elif organic_matter > 4:
        organic_level = "High"
    else:
        organic_level = "Adequate"

    return {
        "pH_status": ph_status,
        "organic_matter_level": organic_level,
        "recommendations": recommendations,
        "soil_specific_advice": SOIL_SPECIFIC_ADVICE.get(soil_type.lower(), "General soil management practices"),
    }


def predict_market_trend(historical_prices: List[float], current_price: float) -> str:
    """
    Compares the current price with the mean of the three most recent
    historical prices. historical_prices is ordered most recent first.
    """
    if len(historical_prices) < 3:
        return TREND_INSUFFICIENT
    recent = historical_prices[:3]
    average = sum(recent) / len(recent)
    if current_price > average * 1.1:
        return TREND_UPWARD
    if current_price < average * 0.9:
        return TREND_DOWNWARD
    return TREND_STABLE


def parse_price(price_text: str) -> int:
    """'₹2,500 per quintal' -> 2500"""
    digits = re.sub(r"[^\d]", "", price_text)
    if not digits:
        raise ValueError(f"No price found in '{price_text}'")
    return int(digits)


def match_government_schemes(category: str) -> List[dict]:
    schemes = GOVERNMENT_SCHEMES.get(category.lower(), GOVERNMENT_SCHEMES["subsidy"])
    return [dict(s) for s in schemes]


def _leading_number(value) -> Optional[float]:
    """Reads '31.5°C' or '45%' style readings."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = re.match(r"\s*(-?\d+(?:\.\d+)?)", str(value))
    return float(match.group(1)) if match else None


def calculate_water_requirement(crop: str, stage: str, weather: Optional[dict], soil_type: str) -> int:
    base = CROP_WATER_REQUIREMENTS.get(crop.lower(), {}).get(stage.lower(), DEFAULT_WATER_REQUIREMENT)

    adjustment = 1.0
    weather = weather or {}
    temperature = _leading_number(weather.get("temperature"))
    humidity = _leading_number(weather.get("humidity"))
    if temperature is not None and temperature > 30:
        adjustment *= 1.2
    if humidity is not None and humidity < 50:
        adjustment *= 1.1
    adjustment *= SOIL_WATER_ADJUSTMENT.get(soil_type.lower(), 1.0)

    return round(base * adjustment)


def project_harvest(crop: str, planting_date: Optional[datetime] = None, now: Optional[datetime] = None) -> dict:
    """Projects the harvest date, readiness and market timing for a crop."""
    now = now or datetime.now(timezone.utc)
    planting_date = planting_date or now - timedelta(days=DEFAULT_PLANTING_AGE_DAYS)

    duration = CROP_DURATIONS_DAYS.get(crop.lower(), DEFAULT_CROP_DURATION_DAYS)
    expected_harvest = planting_date + timedelta(days=duration)
    days_to_harvest = math.ceil(days_between(now, expected_harvest))

    if days_to_harvest <= 0:
        readiness = "Ready for harvest"
    elif days_to_harvest <= 14:
        readiness = "Harvest soon"
    else:
        readiness = "Still growing"

    return {
        "crop_name": crop,
        "planting_date": planting_date.date().isoformat(),
        "current_growth_stage": crop_growth_stage(crop, planting_date, now),
        "estimated_harvest_date": expected_harvest.date().isoformat(),
        "days_to_harvest": max(days_to_harvest, 0),
        "harvest_readiness": readiness,
        "market_timing_advice": (
            "Check current market prices before harvesting"
            if days_to_harvest <= 7
            else "Monitor market trends for optimal timing"
        ),
        "preparation_checklist": [
            "Check crop maturity indicators",
            "Prepare harvesting equipment",
            "Arrange storage or immediate sale",
            "Check weather forecast for harvest window",
        ],
    }


def crop_advice(crop_name: str, growth_stage: str, location: str) -> dict:
    return {
        "advice": (
            f"For {crop_name} in {growth_stage} stage at {location}, "
            "apply balanced fertilizer and ensure proper drainage."
        ),
        "fertilizer_recommendation": "NPK 20-10-10",
        "watering_schedule": "Water every 3-4 days",
    }


def compare_crop_choices(season: str, land_area: float) -> dict:
    return {
        "season": season,
        "land_area": land_area,
        "recommended_crops": ["Rice", "Wheat", "Maize"],
        "profit_potential": {"rice": "High", "wheat": "Medium", "maize": "High"},
        "suitability_score": {"rice": 85, "wheat": 70, "maize": 90},
    }
