"""
Error kinds raised by the paste service and the record stores.
"""


class PasteError(Exception):
    """Base class for every paste lifecycle error."""

    status_code = 500


class ValidationError(PasteError):
    """Caller-supplied data violates a documented constraint."""

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class NotFound(PasteError):
    """
    The paste is absent, expired, or out of views.

    The three cases are deliberately a single error so callers cannot tell
    whether a paste ever existed.
    """

    status_code = 404

    def __init__(self, paste_id: str):
        super().__init__("Paste not found, expired, or view limit exceeded")
        self.paste_id = paste_id


class StoreError(PasteError):
    """The underlying record store failed or timed out."""

    status_code = 500
