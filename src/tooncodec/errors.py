"""Exceptions raised by the TOON encoder/decoder."""


class ToonError(ValueError):
    """Base class for all TOON codec errors."""


class ToonEncodeError(ToonError):
    """A value cannot be represented in TOON."""


class ToonDecodeError(ToonError):
    """TOON text is malformed.

    Args:
        message: Description of the problem.
        line_number: 1-based line the problem was found on, if known.
    """

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)
