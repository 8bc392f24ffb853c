import pytest

from vellum.levenshtein.alphabet import (
    FullCharacteristicVector,
    dedupe,
    query_chars,
)


def test_alphabet_happy():
    entries = list(query_chars("happy"))
    assert [c for c, _ in entries] == ["a", "h", "p", "y"]
    assert [fcv[0] for _, fcv in entries] == [2, 1, 12, 16]


def test_full_characteristic():
    fcv = FullCharacteristicVector([2, 0])
    assert fcv.shift_and_mask(1, 1) == 1

    fcv = FullCharacteristicVector([(1 << 5) + (1 << 10), 0])
    assert fcv.shift_and_mask(3, 63) == 4


def test_long_characteristic():
    alphabet = iter(query_chars("aaaaaaaaaaaaaaaaaaaaaaaaaaaaaabcabewa"))

    c, chi = next(alphabet)
    assert c == "a"
    assert chi.shift_and_mask(0, 7) == 7
    assert chi.shift_and_mask(28, 7) == 3
    assert chi.shift_and_mask(28, 127) == 1 + 2 + 16
    assert chi.shift_and_mask(28, 4095) == 1 + 2 + 16 + 256

    c, chi = next(alphabet)
    assert c == "b"
    assert chi.shift_and_mask(0, 7) == 0
    assert chi.shift_and_mask(28, 15) == 4
    assert chi.shift_and_mask(28, 63) == 4 + 32


def test_vector_ends_with_zero_word():
    (_, fcv), = list(query_chars("a" * 40))
    assert tuple(fcv) == (0xFFFFFFFF, 0xFF, 0)


def test_empty_query_has_no_characters():
    assert len(query_chars("")) == 0


def test_dedupe_keeps_first_occurrence():
    assert dedupe("banana") == "ban"
    assert dedupe("寿司寿") == "寿司"


def test_multibyte_characters_count_once():
    entries = dict(query_chars("cát"))
    assert entries["c"][0] == 1
    assert entries["á"][0] == 2
    assert entries["t"][0] == 4


def test_shift_past_end_raises():
    fcv = FullCharacteristicVector([1, 0])
    with pytest.raises(IndexError):
        fcv.shift_and_mask(64, 1)