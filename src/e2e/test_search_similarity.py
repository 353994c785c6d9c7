# src/e2e/test_search_similarity.py
import pytest

from fieldsuggest.fields import FieldType
from fieldsuggest.index import IndexManager
from fieldsuggest.models import IndexEntry
from fieldsuggest.search import SearchEngine, levenshtein_distance, levenshtein_similarity
from fieldsuggest.sources import MemorySource


def _entry(value: str, tokens=None) -> IndexEntry:
    return IndexEntry(
        value=value, frequency=1, first_used=0, last_used=0,
        search_tokens=frozenset(tokens) if tokens is not None else IndexManager.generate_search_tokens(value),
    )


@pytest.fixture
def search():
    return SearchEngine(IndexManager(MemorySource()))


def test_search_tokens_for_oro_blanco():
    toks = IndexManager.generate_search_tokens("Oro Blanco")
    for t in ("oro blanco", "oro", "blanco", "or", "ro", "bl", "bla", "lan", "anco", "co", "blanc"):
        assert t in toks
    # single letters never become tokens
    assert "o" not in toks and "b" not in toks


def test_search_tokens_skip_one_letter_words():
    toks = IndexManager.generate_search_tokens("Anillo y Aretes")
    assert "y" not in toks
    assert "anillo y aretes" in toks
    assert "ret" in toks


def test_prefix_match_is_case_insensitive(search):
    assert search.calculate_similarity("an", _entry("Anillo")) == 1.0


def test_substring_match(search):
    assert search.calculate_similarity("illo", _entry("Anillo")) == 0.8


def test_token_tiers_apply_after_value_checks(search):
    e = _entry("Collar", tokens=["collar", "gargantilla"])
    assert search.calculate_similarity("garg", e) == 0.7
    assert search.calculate_similarity("anti", e) == 0.5


def test_typo_falls_back_to_levenshtein(search):
    sim = search.calculate_similarity("anilo", _entry("Anillo"))
    assert sim == pytest.approx(5 / 6)


def test_levenshtein_distance():
    assert levenshtein_distance("anillo", "anilo") == 1
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("plata", "plata") == 0


def test_levenshtein_similarity_edges():
    assert levenshtein_similarity("", "") == 1
    assert levenshtein_similarity("", "a") == 0
    assert levenshtein_similarity("a", "") == 0
    assert levenshtein_similarity("abc", "abd") == pytest.approx(2 / 3)
    assert levenshtein_similarity("ab", "xyzw") == 0


def test_find_candidates_filters_low_similarity():
    mgr = IndexManager(MemorySource())
    mgr.add_to_index(FieldType.PIECE_TYPE, "Anillo", 1)
    mgr.add_to_index(FieldType.PIECE_TYPE, "Collar", 1)
    search = SearchEngine(mgr)

    out = {c.value: c.similarity for c in search.find_candidates("pieceType", "  ANI ")}
    assert out["Anillo"] == 1.0
    assert all(sim > 0.1 for sim in out.values())
    # nothing shares a letter with "zzz": every token scores 0
    assert search.find_candidates(FieldType.PIECE_TYPE, "zzz") == []


def test_find_candidates_unknown_or_empty_field(search):
    assert search.find_candidates("nickname", "ju") == []
    assert search.find_candidates(FieldType.STONES, "di") == []


def test_find_candidates_threshold_is_strict():
    mgr = IndexManager(MemorySource())
    # best token of each scores 1/10 and 2/10 against the query
    mgr.add_to_index(FieldType.DESCRIPTION, "azzzzzzzzz", 1)
    mgr.add_to_index(FieldType.DESCRIPTION, "abzzzzzzzz", 1)
    search = SearchEngine(mgr)

    assert levenshtein_similarity("abcdefghij", "azzzzzzzzz") == 0.1
    out = {c.value: c.similarity for c in search.find_candidates(FieldType.DESCRIPTION, "abcdefghij")}
    assert "azzzzzzzzz" not in out
    assert out["abzzzzzzzz"] == pytest.approx(0.2)
