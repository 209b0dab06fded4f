import string
from typing import Iterable

from golfsearch.core.exceptions import ConfigurationError, InvalidCharacterError


DEFAULT_CHARACTERS = (
    string.ascii_uppercase
    + string.ascii_lowercase
    + string.digits
    + " !\"#%&'()*+,-./:;<=>?[\\]^{|}~"
)

# Named alphabets selectable from the command line
ALPHABETS: dict[str, str] = {
    "default": DEFAULT_CHARACTERS,
    "digits": string.digits,
    "lower": string.ascii_lowercase,
    "alnum": string.ascii_letters + string.digits,
    "printable": "".join(chr(c) for c in range(32, 127)),
}


class Alphabet:
    """An ordered set of characters that candidates are built from.

    The position of a character is its index in the enumeration, so the
    order of the alphabet is also the order of the search.
    """

    def __init__(self, characters: str):
        if not characters:
            raise ConfigurationError("Alphabet must contain at least one character", code="empty_alphabet")

        self._characters = characters
        self._positions: dict[str, int] = {}
        for index, ch in enumerate(characters):
            if ch in self._positions:
                raise ConfigurationError(
                    f"Character {ch!r} appears more than once in the alphabet",
                    code="duplicate_character",
                )
            self._positions[ch] = index

    @property
    def characters(self) -> str:
        return self._characters

    @property
    def radix(self) -> int:
        return len(self._characters)

    def __len__(self) -> int:
        return len(self._characters)

    def __contains__(self, ch: str) -> bool:
        return ch in self._positions

    def __repr__(self) -> str:
        return f"Alphabet({self._characters!r})"

    def encode(self, indices: Iterable[int]) -> str:
        """Convert an index vector into candidate text."""
        return "".join(self._characters[i] for i in indices)

    def decode(self, text: str) -> list[int]:
        """Convert candidate text back into an index vector."""
        indices = []
        for position, ch in enumerate(text):
            index = self._positions.get(ch)
            if index is None:
                raise InvalidCharacterError(ch, position)
            indices.append(index)
        return indices


def get_alphabet(name: str) -> Alphabet:
    """Look up a named alphabet."""
    characters = ALPHABETS.get(name.lower())
    if characters is None:
        raise ConfigurationError(
            f"Unknown alphabet: {name} (choose from {', '.join(sorted(ALPHABETS))})",
            code="unknown_alphabet",
        )
    return Alphabet(characters)


def alphabet_from_settings(name: str, charset: str | None = None) -> Alphabet:
    """A literal character set wins over a named preset."""
    if charset:
        return Alphabet(charset)
    return get_alphabet(name)

