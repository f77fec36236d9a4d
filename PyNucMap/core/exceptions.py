"""Exceptions for PyNucMap nucleosome positioning and verification."""


class SignalNotFound(KeyError):
    """Exception raised when a chromosome or signal is absent from the signal store.

    During positioning this is a configuration problem; during verification
    it only causes the affected call to be skipped.
    """
    pass


class NothingToCall(Exception):
    """Exception raised when no chromosomes are available for scanning."""
    pass


class MissingColumnsError(ValueError):
    """Exception raised when a call table lacks mandatory coordinate columns.

    Verification needs at least chromosome, start and stop columns. A table
    without them cannot be verified at all.
    """
    pass
