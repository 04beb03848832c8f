"""
Custom exceptions for the text acquisition backends.

These never leave the package: the acquisition cascade catches them and
records the failed attempt in an AcquisitionFailure.
"""


class BackendError(Exception):
    """Raised when an acquisition backend ran but could not produce text"""
    pass


class BackendUnavailable(BackendError):
    """Raised when a backend's tool or interpreter is not installed"""
    pass
