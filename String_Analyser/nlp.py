"""
Translate short English queries into structured string filters.

Rules are evaluated in declaration order against the lower-cased query and
every matching rule contributes its filters. When two rules set the same key
the later rule wins, so "containing the letter e that contain the first
vowel" ends up filtering on "a".
"""
import logging
import re
from collections import namedtuple

from .exceptions import ConflictingFilters, MissingInput, Unparseable

logger = logging.getLogger(__name__)

Rule = namedtuple('Rule', ['name', 'pattern', 'produce'])

RULES = (
    Rule('single_word', re.compile(r'single word'),
         lambda match: {'word_count': 1}),
    Rule('two_words', re.compile(r'two words'),
         lambda match: {'word_count': 2}),
    Rule('three_words', re.compile(r'three words'),
         lambda match: {'word_count': 3}),
    Rule('word_count', re.compile(r'word count of (\d+)'),
         lambda match: {'word_count': int(match.group(1))}),
    Rule('palindrome', re.compile(r'palindromic|palindrome'),
         lambda match: {'is_palindrome': True}),
    Rule('longer_than', re.compile(r'longer than (\d+)'),
         lambda match: {'min_length': int(match.group(1)) + 1}),
    Rule('shorter_than', re.compile(r'shorter than (\d+)'),
         lambda match: {'max_length': int(match.group(1)) - 1}),
    Rule('letter', re.compile(r'\bletter\s+([a-z])\b'),
         lambda match: {'contains_character': match.group(1)}),
    Rule('first_vowel', re.compile(r'contain the first vowel'),
         lambda match: {'contains_character': 'a'}),
)


def parse_query(query, rules=RULES):
    """Apply every rule to ``query`` and merge the filters of those that match."""
    query_lower = query.lower()
    parsed_filters = {}
    for rule in rules:
        match = rule.pattern.search(query_lower)
        if match:
            parsed_filters.update(rule.produce(match))
    return parsed_filters


def find_conflict(parsed_filters):
    """Return a message describing a contradictory filter combination, or None."""
    min_length = parsed_filters.get('min_length')
    max_length = parsed_filters.get('max_length')

    if min_length is not None and parsed_filters.get('word_count') == 0:
        return "Conflicting filters detected: min_length cannot be combined with a word count of 0."
    if min_length is not None and max_length is not None and min_length > max_length:
        return "Conflicting filters detected: min_length cannot be greater than max_length."
    return None


def interpret(query, rules=RULES):
    """
    Turn a natural-language query into filters for ``apply_filters``.

    Raises MissingInput for an empty query, Unparseable when no rule matched
    and ConflictingFilters when the matched rules contradict each other.
    """
    if not query:
        raise MissingInput()

    parsed_filters = parse_query(query, rules)
    if not parsed_filters:
        raise Unparseable()

    conflict = find_conflict(parsed_filters)
    if conflict:
        raise ConflictingFilters(conflict)

    logger.debug("Interpreted query %r as %s", query, parsed_filters)
    return parsed_filters
