"""
Utils module - small normalization helpers shared by the store, the
engine and the HTTP layer.
"""
import re

from config import BLANK_BATCH_MARKERS

_CAMEL_BOUNDARY = re.compile(r'_([a-z0-9])')


def normalize_semester(semester):
    """Normalize a semester value to a positive int.

    Accepts ints, "3" and "Semester 3". Raises ValueError otherwise.
    """
    if isinstance(semester, bool):
        raise ValueError(f"Invalid semester: {semester!r}")
    if isinstance(semester, int):
        number = semester
    else:
        text = str(semester).strip()
        if text.lower().startswith("semester"):
            text = text[len("semester"):].strip()
        number = int(text)
    if number < 1:
        raise ValueError(f"Semester must be positive, got {number}")
    return number


def normalize_batch(batch, default):
    """Return the batch label, or *default* when the batch is blank/"none"/"-"."""
    if batch is None:
        return default
    text = str(batch).strip()
    if text.lower() in BLANK_BATCH_MARKERS:
        return default
    return text


def to_camel(name):
    """Convert a snake_case attribute name to the camelCase wire name."""
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def camelize_keys(data):
    """Recursively camelize dict keys; lists are walked, scalars returned as-is."""
    if isinstance(data, dict):
        return {to_camel(key): camelize_keys(value) for key, value in data.items()}
    if isinstance(data, list):
        return [camelize_keys(item) for item in data]
    return data


def parse_bool(value, default=False):
    """Parse a query-string flag ("true", "1", "yes")."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def text_sort_key(value):
    """Case-insensitive sort key approximating a locale compare."""
    text = '' if value is None else str(value)
    return (text.casefold(), text)
