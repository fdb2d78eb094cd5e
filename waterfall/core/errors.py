"""Exceptions raised by the analysis pipeline."""


class WaterfallError(Exception):
    """Base class for all Waterfall Notes errors."""


class InvalidArgumentError(WaterfallError, ValueError):
    """A construction parameter is out of range (chunk size, frequency bounds, ...)."""


class InvalidLengthError(WaterfallError, ValueError):
    """FFT input length is not a power of two."""
