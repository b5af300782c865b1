import hashlib
import re
import threading
from urllib.parse import quote

from django.test import SimpleTestCase
from rest_framework.test import APIClient, APIRequestFactory

from .exceptions import (
    Conflict,
    ConflictingFilters,
    InvalidInput,
    MissingInput,
    NotFound,
    TypeMismatch,
    Unparseable,
)
from .filters import apply_filters
from .nlp import interpret, parse_query
from .store import RecordStore
from .utils import analyze_string
from .views import NaturalLanguageFilterView, StringAnalyzerView, StringDetailView


class AnalyzeStringTests(SimpleTestCase):
    def test_hash_is_64_lowercase_hex(self):
        for value in ["", "hello", "A man a plan a canal Panama", "ñandú 🐍", "\ud800", "a\x00b"]:
            props = analyze_string(value)
            self.assertRegex(props.sha256_hash, r"^[0-9a-f]{64}$")
            self.assertEqual(props.sha256_hash, analyze_string(value).sha256_hash)

    def test_lone_surrogates_hash_as_replacement_character(self):
        self.assertEqual(
            analyze_string("\ud800").sha256_hash,
            hashlib.sha256("\ufffd".encode("utf-8")).hexdigest(),
        )
        # A surrogate pair hashes like the character it encodes.
        self.assertEqual(analyze_string("\ud83d\udc0d").sha256_hash, analyze_string("🐍").sha256_hash)

    def test_known_digest(self):
        self.assertEqual(
            analyze_string("hello").sha256_hash,
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824",
        )

    def test_sentence_palindrome(self):
        props = analyze_string("A man a plan a canal Panama")
        self.assertTrue(props.is_palindrome)
        self.assertEqual(props.word_count, 7)
        self.assertEqual(props.length, 27)

    def test_palindrome_ignores_case_and_whitespace(self):
        self.assertTrue(analyze_string("racecar").is_palindrome)
        self.assertTrue(analyze_string("Race Car").is_palindrome)
        self.assertTrue(analyze_string("r a\tC e\nc a R").is_palindrome)
        self.assertFalse(analyze_string("hello").is_palindrome)
        # Punctuation is not cleaned away.
        self.assertFalse(analyze_string("race, car").is_palindrome)

    def test_empty_string(self):
        props = analyze_string("")
        self.assertEqual(props.length, 0)
        self.assertTrue(props.is_palindrome)
        self.assertEqual(props.unique_characters, 0)
        self.assertEqual(props.word_count, 0)
        self.assertEqual(props.character_frequency_map, {})

    def test_whitespace_only_has_no_words(self):
        props = analyze_string("   \t ")
        self.assertEqual(props.word_count, 0)
        self.assertEqual(props.length, 5)

    def test_character_counts_are_case_sensitive(self):
        props = analyze_string("Aab a")
        self.assertEqual(props.character_frequency_map, {"A": 1, "a": 2, "b": 1, " ": 1})
        self.assertEqual(props.unique_characters, 4)
        self.assertEqual(props.word_count, 2)


class RecordStoreTests(SimpleTestCase):
    def setUp(self):
        self.store = RecordStore()

    def test_insert_returns_record_keyed_by_hash(self):
        record = self.store.insert("hello")
        self.assertEqual(record.id, record.properties.sha256_hash)
        self.assertEqual(record.value, "hello")
        self.assertIsNotNone(record.created_at)
        self.assertIn("hello", self.store)
        self.assertEqual(len(self.store), 1)

    def test_duplicate_insert_conflicts_and_keeps_original(self):
        first = self.store.insert("hello")
        with self.assertRaises(Conflict):
            self.store.insert("hello")
        self.assertIs(self.store.get("hello"), first)
        self.assertEqual(len(self.store), 1)

    def test_insert_rejects_missing_and_non_strings(self):
        with self.assertRaises(InvalidInput):
            self.store.insert(None)
        with self.assertRaises(TypeMismatch):
            self.store.insert(42)
        self.assertEqual(len(self.store), 0)

    def test_concurrent_inserts_store_one_record(self):
        workers = 8
        barrier = threading.Barrier(workers)
        outcomes = []
        outcomes_lock = threading.Lock()

        def insert():
            barrier.wait()
            try:
                self.store.insert("same value")
                outcome = "stored"
            except Conflict:
                outcome = "conflict"
            with outcomes_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=insert) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        self.assertEqual(sorted(outcomes), ["conflict"] * (workers - 1) + ["stored"])
        self.assertEqual(len(self.store), 1)

    def test_list_all_keeps_insertion_order(self):
        for value in ["b", "a", "c"]:
            self.store.insert(value)
        self.assertEqual([r.value for r in self.store.list_all()], ["b", "a", "c"])

    def test_delete_then_get(self):
        self.store.insert("hello")
        self.store.delete("hello")
        with self.assertRaises(NotFound):
            self.store.delete("hello")
        with self.assertRaises(NotFound):
            self.store.get("hello")

    def test_get_unknown_value(self):
        with self.assertRaises(NotFound):
            self.store.get("missing")


class ApplyFiltersTests(SimpleTestCase):
    def setUp(self):
        self.store = RecordStore()
        for value in ["hi", "hello", "hey", "racecar", "Never odd or even"]:
            self.store.insert(value)
        self.records = self.store.list_all()

    def values(self, filters):
        matches, _ = apply_filters(self.records, filters)
        return [r.value for r in matches]

    def test_no_filters_returns_everything(self):
        matches, normalized = apply_filters(self.records, {})
        self.assertEqual(matches, self.records)
        self.assertEqual(normalized, {})

    def test_min_length(self):
        matches, _ = apply_filters(
            [r for r in self.records if r.value in ("hi", "hello", "hey")], {"min_length": 5})
        self.assertEqual([r.value for r in matches], ["hello"])

    def test_max_length_and_palindrome(self):
        self.assertEqual(self.values({"max_length": 3}), ["hi", "hey"])
        self.assertEqual(self.values({"is_palindrome": True}), ["racecar", "Never odd or even"])
        self.assertEqual(self.values({"is_palindrome": False}), ["hi", "hello", "hey"])

    def test_word_count_and_contains_character(self):
        self.assertEqual(self.values({"word_count": 4}), ["Never odd or even"])
        self.assertEqual(self.values({"contains_character": "N"}), ["Never odd or even"])
        self.assertEqual(self.values({"contains_character": "he"}), ["hello", "hey"])

    def test_filters_are_combined(self):
        self.assertEqual(
            self.values({"is_palindrome": True, "word_count": 1, "contains_character": "c"}),
            ["racecar"],
        )

    def test_normalized_filters_skip_unsupplied(self):
        _, normalized = apply_filters(self.records, {
            "is_palindrome": True,
            "min_length": "3",
            "max_length": None,
            "contains_character": "a",
        })
        self.assertEqual(normalized, {"is_palindrome": True, "min_length": 3, "contains_character": "a"})


class InterpretTests(SimpleTestCase):
    def test_palindromic_single_word(self):
        self.assertEqual(
            interpret("Find palindromic single word strings"),
            {"word_count": 1, "is_palindrome": True},
        )

    def test_longer_than(self):
        self.assertEqual(interpret("strings longer than 10 characters"), {"min_length": 11})

    def test_letter(self):
        self.assertEqual(interpret("strings containing the letter z"), {"contains_character": "z"})

    def test_first_vowel(self):
        self.assertEqual(
            interpret("palindromic strings that contain the first vowel"),
            {"is_palindrome": True, "contains_character": "a"},
        )

    def test_later_rule_wins(self):
        self.assertEqual(
            parse_query("containing the letter e that contain the first vowel"),
            {"contains_character": "a"},
        )

    def test_extra_word_count_phrases(self):
        self.assertEqual(interpret("strings with two words"), {"word_count": 2})
        self.assertEqual(interpret("a word count of 4"), {"word_count": 4})
        self.assertEqual(interpret("strings shorter than 5"), {"max_length": 4})

    def test_empty_query(self):
        with self.assertRaises(MissingInput):
            interpret("")
        with self.assertRaises(MissingInput):
            interpret(None)

    def test_unparseable(self):
        with self.assertRaises(Unparseable):
            interpret("banana smoothie")

    def test_conflicting_filters(self):
        with self.assertRaises(ConflictingFilters):
            interpret("strings longer than 3 with word count of 0")
        with self.assertRaises(ConflictingFilters):
            interpret("longer than 10 and shorter than 5")

    def test_shorter_than_zero_matches_nothing(self):
        store = RecordStore()
        store.insert("")
        parsed_filters = interpret("strings shorter than 0")
        self.assertEqual(parsed_filters, {"max_length": -1})
        matches, _ = apply_filters(store.list_all(), parsed_filters)
        self.assertEqual(matches, [])


class StringViewTests(SimpleTestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.store = RecordStore()
        self.list_view = StringAnalyzerView.as_view(store=self.store)
        self.detail_view = StringDetailView.as_view(store=self.store)
        self.nl_view = NaturalLanguageFilterView.as_view(store=self.store)

    def create(self, payload):
        request = self.factory.post("/strings", payload, format="json")
        return self.list_view(request)

    def test_create(self):
        response = self.create({"value": "racecar"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["value"], "racecar")
        self.assertEqual(response.data["id"], response.data["properties"]["sha256_hash"])
        self.assertTrue(response.data["properties"]["is_palindrome"])
        self.assertEqual(response.data["properties"]["character_frequency_map"]["r"], 2)
        self.assertTrue(response.data["created_at"])

    def test_create_errors(self):
        self.assertEqual(self.create({}).status_code, 400)
        self.assertEqual(self.create({"value": None}).status_code, 422)
        self.assertEqual(self.create({"value": 123}).status_code, 422)
        self.assertEqual(self.create({"value": ["a"]}).status_code, 422)
        self.assertEqual(self.create({"value": "x"}).status_code, 201)

        duplicate = self.create({"value": "x"})
        self.assertEqual(duplicate.status_code, 409)
        self.assertIn("error", duplicate.data)

    def test_create_accepts_any_string(self):
        response = self.create({"value": "a\x00b"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["value"], "a\x00b")
        self.assertEqual(response.data["properties"]["length"], 3)

        response = self.create({"value": ""})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data["properties"]["is_palindrome"])

    def test_list_with_filters(self):
        for value in ["hi", "hello", "hey", "level"]:
            self.create({"value": value})

        response = self.list_view(self.factory.get("/strings"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 4)
        self.assertEqual(len(response.data["data"]), 4)
        self.assertEqual(response.data["filters_applied"], {})

        response = self.list_view(self.factory.get(
            "/strings", {"is_palindrome": "true", "min_length": "5"}))
        self.assertEqual([item["value"] for item in response.data["data"]], ["level"])
        self.assertEqual(response.data["filters_applied"], {"is_palindrome": True, "min_length": 5})

        response = self.list_view(self.factory.get("/strings", {"is_palindrome": "no"}))
        self.assertEqual(response.data["count"], 3)

    def test_list_rejects_bad_integers(self):
        response = self.list_view(self.factory.get("/strings", {"min_length": "abc"}))
        self.assertEqual(response.status_code, 400)
        response = self.list_view(self.factory.get("/strings", {"word_count": "-1"}))
        self.assertEqual(response.status_code, 400)

    def test_get_and_delete(self):
        self.create({"value": "hello world"})

        response = self.detail_view(self.factory.get("/strings/hello%20world"), value="hello world")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["properties"]["word_count"], 2)

        response = self.detail_view(self.factory.delete("/strings/hello%20world"), value="hello world")
        self.assertEqual(response.status_code, 204)
        self.assertIsNone(response.data)

        response = self.detail_view(self.factory.delete("/strings/hello%20world"), value="hello world")
        self.assertEqual(response.status_code, 404)
        response = self.detail_view(self.factory.get("/strings/hello%20world"), value="hello world")
        self.assertEqual(response.status_code, 404)

    def test_natural_language(self):
        for value in ["noon", "hello", "nurses run"]:
            self.create({"value": value})

        response = self.nl_view(self.factory.get(
            "/strings/filter-by-natural-language",
            {"query": "Find palindromic single word strings"}))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["value"] for item in response.data["data"]], ["noon"])
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["interpreted_query"], {
            "original": "Find palindromic single word strings",
            "parsed_filters": {"word_count": 1, "is_palindrome": True},
        })

    def test_natural_language_errors(self):
        url = "/strings/filter-by-natural-language"
        self.assertEqual(self.nl_view(self.factory.get(url)).status_code, 400)
        self.assertEqual(self.nl_view(self.factory.get(url, {"query": ""})).status_code, 400)

        response = self.nl_view(self.factory.get(url, {"query": "banana smoothie"}))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["interpreted_query"]["parsed_filters"], {})

        response = self.nl_view(self.factory.get(
            url, {"query": "strings longer than 3 with word count of 0"}))
        self.assertEqual(response.status_code, 422)


class StringRoutingTests(SimpleTestCase):
    def setUp(self):
        self.client = APIClient()

    def test_round_trip_through_urls(self):
        value = "routing check level"
        response = self.client.post("/strings", {"value": value}, format="json")
        self.assertEqual(response.status_code, 201)
        record_id = response.json()["id"]
        self.assertTrue(re.fullmatch(r"[0-9a-f]{64}", record_id))

        response = self.client.get("/strings/filter-by-natural-language",
                                   {"query": "strings containing the letter v"})
        self.assertEqual(response.status_code, 200)
        self.assertIn(record_id, [item["id"] for item in response.json()["data"]])

        response = self.client.get(f"/strings/{quote(value)}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["value"], value)

        self.assertEqual(self.client.delete(f"/strings/{quote(value)}").status_code, 204)
        self.assertEqual(self.client.get(f"/strings/{quote(value)}").status_code, 404)
