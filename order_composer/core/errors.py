"""
Exception hierarchy for composition failures.

Every error is terminal for the composition call that raised it.
"""


class ComposerError(Exception):
    """Base class for all composition errors."""


class MissingRequiredInput(ComposerError):
    """A required input buffer was not supplied."""


class MissingPrimaryDocument(MissingRequiredInput):
    """No primary document was supplied."""


class UnsupportedMediaType(ComposerError):
    """The declared media type is neither a supported raster nor PDF."""

    def __init__(self, media_type: str, context: str = "asset"):
        self.media_type = media_type
        super().__init__(f"Unsupported media type for {context}: {media_type or '<none>'}")


class DecodeError(ComposerError):
    """Raster or document bytes could not be decoded."""


class InvalidPrimaryFormat(DecodeError):
    """The primary document is not a parseable PDF."""


class SerializationError(ComposerError):
    """The composed document could not be written to bytes."""


class LayoutConfigError(ComposerError, ValueError):
    """The layout configuration does not match the supplied assets."""
