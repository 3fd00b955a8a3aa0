# notifier/services/text_repair/errors.py
"""
Error taxonomy for the text-repair engine.

None of these errors ever reach an HTTP client: the service boundary
catches them and passes the original text through unrepaired.
"""


class TextRepairError(Exception):
    """Base class for text-repair failures."""

    pass


class InputTypeError(TextRepairError, TypeError):
    """Raised when something other than a str is handed to the engine."""

    pass


class RemoteUnavailable(TextRepairError):
    """Remote enrichment failed (network, timeout, bad status or malformed body)."""

    pass


class CacheError(TextRepairError):
    """The repair cache backing store could not be read or written."""

    pass
