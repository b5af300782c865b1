from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict

from django.utils import timezone


@dataclass(frozen=True)
class StringProperties:
    length: int
    is_palindrome: bool
    unique_characters: int
    word_count: int
    sha256_hash: str
    character_frequency_map: Dict[str, int]


@dataclass(frozen=True)
class StringRecord:
    """A stored string. Records are kept in memory and never mutated."""

    value: str
    properties: StringProperties
    created_at: datetime = field(default_factory=timezone.now)

    @property
    def id(self) -> str:
        return self.properties.sha256_hash

    def __str__(self):
        return f"{self.value} - {self.id[:50]}"
