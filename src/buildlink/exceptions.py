"""Custom exceptions"""


class BuildCodeError(ValueError):
    """Base class for anything that makes a build code undecodable."""


class AlphabetError(BuildCodeError):
    """Raised when a build code contains a character outside the frame alphabet."""

    def __init__(self, char: str):
        super().__init__(f"Character {char!r} is not allowed in a build code")
        self.char = char


class InvalidDigitError(BuildCodeError):
    """Raised when a value is not a valid base62 number."""

    def __init__(self, char: str, text: str = ""):
        super().__init__(f"Invalid base62 digit {char!r} in {text!r}")
        self.char = char
        self.text = text


class CountMismatchError(BuildCodeError):
    """Raised when a declared count disagrees with the content it describes."""

    def __init__(self, what: str, expected, actual):
        super().__init__(f"{what} count mismatch: expected {expected}, got {actual}")
        self.what = what
        self.expected = expected
        self.actual = actual


class IncompleteFrameError(BuildCodeError):
    """Raised when fewer segments are present than a declared count requires."""


class SchemaError(ValueError):
    """Raised when a node definition list cannot be classified into branches."""


class OrphanNodeError(SchemaError):
    """Raised in strict mode when a node's parent chain reaches no branch root."""

    def __init__(self, node_id: str):
        super().__init__(f"Node {node_id!r} does not descend from any branch root")
        self.node_id = node_id
