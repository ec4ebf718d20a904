from typing import Optional


class CurlParseError(ValueError):
    """Raised when a copied curl command cannot be parsed.

    Carries the full input, the offset where matching stopped and a short
    description of what was expected there.
    """

    def __init__(self, text: str, position: int, expected: str, message: Optional[str] = None):
        self.text = text
        self.position = position
        self.expected = expected
        super().__init__(message or f"expected {expected} at position {position}: {self.fragment!r}")

    @property
    def fragment(self) -> str:
        # First line of what could not be matched, clipped for display
        rest = self.text[self.position:]
        line = rest.split('\n', 1)[0]
        return line if len(line) <= 60 else line[:57] + '...'


class StructuralError(CurlParseError):
    """Missing `curl`, quote or separator where one is required."""


class MalformedCookieError(CurlParseError):
    """A Cookie header segment without `=` or with an empty name."""


class UnrecognizedOptionError(CurlParseError):
    """No option shape matches at this position."""
