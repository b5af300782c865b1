"""Structured filtering over stored string records.

Every filter is optional and all supplied filters must hold for a record to
match. Filtering works on a snapshot and never touches the store.
"""

FILTER_NAMES = (
    'is_palindrome',
    'min_length',
    'max_length',
    'word_count',
    'contains_character',
)

_COERCE = {
    'is_palindrome': bool,
    'min_length': int,
    'max_length': int,
    'word_count': int,
    'contains_character': str,
}

_PREDICATES = {
    'is_palindrome': lambda record, wanted: record.properties.is_palindrome is wanted,
    'min_length': lambda record, bound: record.properties.length >= bound,
    'max_length': lambda record, bound: record.properties.length <= bound,
    'word_count': lambda record, count: record.properties.word_count == count,
    'contains_character': lambda record, text: text.lower() in record.value.lower(),
}


def normalize_filters(filters):
    """Coerce each supplied filter to its type; unsupplied (None) filters are dropped."""
    filters = filters or {}
    return {
        name: _COERCE[name](filters[name])
        for name in FILTER_NAMES
        if filters.get(name) is not None
    }


def apply_filters(records, filters=None):
    """
    Return ``(matches, normalized_filters)`` for the given records.

    With no filters every record matches.
    """
    normalized = normalize_filters(filters)
    matches = [
        record for record in records
        if all(_PREDICATES[name](record, wanted) for name, wanted in normalized.items())
    ]
    return matches, normalized
