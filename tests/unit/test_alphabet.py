"""Unit tests for the alphabet codec."""

import itertools

import pytest

from golfsearch.core.exceptions import ConfigurationError, InvalidCharacterError
from golfsearch.engine.alphabet import (
    ALPHABETS,
    DEFAULT_CHARACTERS,
    Alphabet,
    alphabet_from_settings,
    get_alphabet,
)


class TestAlphabet:
    """Tests for Alphabet construction and lookups."""

    def test_radix_is_character_count(self):
        assert Alphabet("abc").radix == 3
        assert len(Alphabet("abc")) == 3

    def test_duplicate_character_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Alphabet("abca")
        assert exc_info.value.code == "duplicate_character"

    def test_empty_alphabet_rejected(self):
        with pytest.raises(ConfigurationError):
            Alphabet("")

    def test_contains(self):
        alphabet = Alphabet("xyz")
        assert "y" in alphabet
        assert "a" not in alphabet


class TestCodec:
    """Tests for encode/decode."""

    def test_encode(self):
        alphabet = Alphabet("0123456789")
        assert alphabet.encode([4, 2]) == "42"
        assert alphabet.encode([]) == ""

    def test_decode(self):
        alphabet = Alphabet("abc")
        assert alphabet.decode("cab") == [2, 0, 1]

    def test_decode_invalid_character(self):
        alphabet = Alphabet("abc")
        with pytest.raises(InvalidCharacterError) as exc_info:
            alphabet.decode("abd")
        assert exc_info.value.character == "d"
        assert exc_info.value.position == 2

    def test_invalid_character_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            Alphabet("abc").decode("?")

    def test_decode_inverts_encode(self):
        """Every vector of length 3 over a small alphabet survives a round trip."""
        alphabet = Alphabet("ab(")
        for vector in itertools.product(range(3), repeat=3):
            assert alphabet.decode(alphabet.encode(vector)) == list(vector)

    def test_encode_is_injective(self):
        alphabet = Alphabet("xyz1")
        texts = {alphabet.encode(v) for v in itertools.product(range(4), repeat=3)}
        assert len(texts) == 4 ** 3


class TestPresets:
    """Tests for named alphabets."""

    def test_presets_have_no_duplicates(self):
        for name, characters in ALPHABETS.items():
            assert len(set(characters)) == len(characters), name

    def test_default_alphabet_order(self):
        alphabet = get_alphabet("default")
        assert alphabet.characters == DEFAULT_CHARACTERS
        assert alphabet.encode([0]) == "A"
        assert alphabet.encode([26]) == "a"
        assert alphabet.encode([52]) == "0"
        assert alphabet.characters.count("-") == 1

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            get_alphabet("klingon")

    def test_charset_overrides_preset(self):
        assert alphabet_from_settings("default", "10").characters == "10"
        assert alphabet_from_settings("digits").characters == "0123456789"
