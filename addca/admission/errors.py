from __future__ import annotations


class AdmissionError(Exception):
    """Base class for failures while processing an admission review."""


class DecodeError(AdmissionError):
    """Raised when the request envelope is malformed."""


class ObjectDecodeError(AdmissionError):
    """Raised when the embedded Pod or Job object cannot be decoded."""


__all__ = ["AdmissionError", "DecodeError", "ObjectDecodeError"]
