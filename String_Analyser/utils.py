import hashlib
import re
from collections import Counter

from .models import StringProperties

_WHITESPACE = re.compile(r"\s+")


def to_utf8(value: str) -> bytes:
    """UTF-8 bytes of the string; lone surrogates become U+FFFD."""
    # The UTF-16 round trip joins surrogate pairs and replaces unpaired halves.
    return value.encode('utf-16-le', 'surrogatepass').decode('utf-16-le', 'replace').encode('utf-8')


def compute_sha256(value: str) -> str:
    """Compute SHA-256 hash for the string."""
    return hashlib.sha256(to_utf8(value)).hexdigest()


def clean_string(value: str) -> str:
    """Lower-case the string and drop every whitespace run."""
    return _WHITESPACE.sub('', value.lower())


def is_palindrome(value: str) -> bool:
    """Check if string reads the same forward and backward, ignoring case and whitespace."""
    cleaned = clean_string(value)
    return cleaned == cleaned[::-1]


def analyze_string(value: str) -> StringProperties:
    """Compute all required string properties."""
    return StringProperties(
        length=len(value),
        is_palindrome=is_palindrome(value),
        unique_characters=len(set(value)),
        word_count=len(value.split()),
        sha256_hash=compute_sha256(value),
        character_frequency_map=dict(Counter(value)),
    )
