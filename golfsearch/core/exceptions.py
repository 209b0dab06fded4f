class GolfSearchError(Exception):
    """Base exception for golf-search."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(GolfSearchError):
    """Invalid or incomplete configuration. Raised before any search starts."""

    pass


class InvalidCharacterError(ConfigurationError):
    """Text contains a character that is not part of the alphabet."""

    def __init__(self, character: str, position: int):
        self.character = character
        self.position = position
        super().__init__(
            f"Character {character!r} at position {position} is not in the alphabet",
            code="invalid_character",
        )


class WorkspaceIOError(GolfSearchError):
    """A fixed workspace file could not be written or read."""

    pass


class CompilerUnavailableError(GolfSearchError):
    """The compiler itself could not be started."""

    pass


class ExecutionFailedError(GolfSearchError):
    """A compiled candidate could not be launched at all."""

    pass
