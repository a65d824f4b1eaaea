"""
Input validation for blood pressure readings.

Validators collect every problem in one pass and return a list of error
strings (empty = valid) so a form can show them all at once.
"""
import re

from .time_utils import to_storage, is_future

SYSTOLIC_RANGE = (70, 250)
DIASTOLIC_RANGE = (40, 150)
PULSE_RATE_RANGE = (30, 200)

MAX_COMMENTS_LENGTH = 500
MAX_LOCATION_LENGTH = 100
MAX_DEVICE_LENGTH = 100
MAX_TAG_LENGTH = 50

_INT_PATTERN = re.compile(r'^[+-]?\d+$')


def parse_int(value):
    """
    Parse a whole number from JSON input.

    Accepts ints, integral floats (120.0) and digit strings ('120').
    Returns None for anything else, including booleans and 120.5.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and _INT_PATTERN.match(value.strip()):
        return int(value.strip())
    return None


def _check_int_field(data, key, label, bounds, unit, errors, required):
    """Validate one numeric field, returning the parsed value or None."""
    value = data.get(key)
    if value is None or value == '':
        if required:
            errors.append(f'{label} is required')
        return None

    parsed = parse_int(value)
    if parsed is None:
        errors.append(f'{label} must be a whole number')
        return None

    low, high = bounds
    if parsed < low or parsed > high:
        errors.append(f'{label} must be between {low} and {high} {unit}')
        return None
    return parsed


def _check_text_field(data, key, label, max_length, errors):
    value = data.get(key)
    if value is None:
        return
    if not isinstance(value, str):
        errors.append(f'{label} must be text')
    elif len(value.strip()) > max_length:
        errors.append(f'{label} cannot exceed {max_length} characters')


def validate_reading(data: dict, partial: bool = False, existing=None, now=None) -> list:
    """
    Validate blood pressure reading input. Returns list of error strings.

    Args:
        data: Request body using the API's camelCase keys.
        partial: True for updates, where omitted fields keep their stored value.
        existing: The stored reading being updated, used to check the
            systolic/diastolic relation against merged values.
        now: Reference instant for the future-timestamp check.
    """
    errors = []

    # On update a pressure may be omitted but not cleared
    systolic = _check_int_field(data, 'systolic', 'Systolic pressure', SYSTOLIC_RANGE, 'mmHg',
                                errors, required=not partial or 'systolic' in data)
    diastolic = _check_int_field(data, 'diastolic', 'Diastolic pressure', DIASTOLIC_RANGE, 'mmHg',
                                 errors, required=not partial or 'diastolic' in data)
    _check_int_field(data, 'pulseRate', 'Pulse rate',
                     PULSE_RATE_RANGE, 'bpm', errors, required=False)

    # Relational check uses the merged values on update
    if existing is not None:
        if systolic is None and 'systolic' not in data:
            systolic = existing.systolic
        if diastolic is None and 'diastolic' not in data:
            diastolic = existing.diastolic
    if systolic is not None and diastolic is not None and systolic <= diastolic:
        errors.append('Systolic pressure must be higher than diastolic pressure')

    timestamp = data.get('timestamp')
    if timestamp is not None and timestamp != '':
        try:
            instant = to_storage(timestamp)
        except (ValueError, TypeError):
            errors.append('Reading timestamp is not a valid date/time')
        else:
            if is_future(instant, now=now):
                errors.append('Reading timestamp cannot be more than 1 hour in the future')

    _check_text_field(data, 'comments', 'Comments', MAX_COMMENTS_LENGTH, errors)
    _check_text_field(data, 'location', 'Location', MAX_LOCATION_LENGTH, errors)
    _check_text_field(data, 'deviceUsed', 'Device name', MAX_DEVICE_LENGTH, errors)

    tags = data.get('tags')
    if tags is not None:
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            errors.append('Tags must be a list of strings')
        elif any(len(t.strip()) > MAX_TAG_LENGTH for t in tags):
            errors.append(f'Tag cannot exceed {MAX_TAG_LENGTH} characters')

    return errors
