"""
Blood pressure category classification.

Thresholds are evaluated in order and the first matching rule wins. The
categories overlap, so reordering the checks changes results at the
boundaries (e.g. 140/70 is high-stage-2 on systolic alone).
"""

VERY_LOW = 'very-low'
LOW = 'low'
NORMAL = 'normal'
ELEVATED = 'elevated'
HIGH_STAGE_1 = 'high-stage-1'
HIGH_STAGE_2 = 'high-stage-2'
HYPERTENSIVE_CRISIS = 'hypertensive-crisis'

# Least to most severe
CATEGORIES = (
    VERY_LOW,
    LOW,
    NORMAL,
    ELEVATED,
    HIGH_STAGE_1,
    HIGH_STAGE_2,
    HYPERTENSIVE_CRISIS,
)

CATEGORY_INFO = {
    VERY_LOW: {
        'label': 'Very Low (Severe Hypotension)',
        'color': '#7c3aed',
        'range': 'Less than 80 and less than 50',
        'description': 'This is a medical emergency. Seek immediate medical attention!',
    },
    LOW: {
        'label': 'Low (Hypotension)',
        'color': '#a855f7',
        'range': '80-89 and 50-59',
        'description': 'You have low blood pressure. May cause dizziness or fainting.',
    },
    NORMAL: {
        'label': 'Normal',
        'color': '#22c55e',
        'range': '90-119 and 60-79',
        'description': 'Your blood pressure is in the normal range.',
    },
    ELEVATED: {
        'label': 'Elevated',
        'color': '#eab308',
        'range': '120-129 and less than 80',
        'description': 'Your blood pressure is elevated. May progress to hypertension.',
    },
    HIGH_STAGE_1: {
        'label': 'High – Stage 1 Hypertension',
        'color': '#f97316',
        'range': '130-139 or 80-89',
        'description': 'You have Stage 1 high blood pressure. Consult your doctor.',
    },
    HIGH_STAGE_2: {
        'label': 'High – Stage 2 Hypertension',
        'color': '#ef4444',
        'range': '140-179 or 90-119',
        'description': 'You have Stage 2 high blood pressure. Medical advice recommended.',
    },
    HYPERTENSIVE_CRISIS: {
        'label': 'Highly Elevated (Hypertensive Crisis)',
        'color': '#dc2626',
        'range': '180 or higher and/or 120 or higher',
        'description': 'This is a medical emergency. Seek immediate medical attention!',
    },
}


def classify(systolic: int, diastolic: int) -> str:
    """Classify a systolic/diastolic pair into one of the seven categories.

    Callers are expected to have range-checked the values already.
    """
    if systolic >= 180 or diastolic >= 120:
        return HYPERTENSIVE_CRISIS
    if systolic >= 140 or diastolic >= 90:
        return HIGH_STAGE_2
    if systolic >= 130 or diastolic >= 80:
        return HIGH_STAGE_1
    if systolic >= 120 and diastolic < 80:
        return ELEVATED
    if systolic >= 90 and diastolic >= 60:
        return NORMAL
    if systolic >= 80 and diastolic >= 50:
        return LOW
    return VERY_LOW


def get_category_info() -> dict:
    """Return a copy of the category metadata table for UI legends."""
    return {key: dict(info) for key, info in CATEGORY_INFO.items()}
