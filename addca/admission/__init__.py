"""AdmissionReview envelope decoding and errors."""

from .errors import AdmissionError, DecodeError, ObjectDecodeError
from .review import AdmissionRequest, AdmissionResponse, AdmissionReview, decode_review, encode_review

__all__ = [
    "AdmissionError",
    "AdmissionRequest",
    "AdmissionResponse",
    "AdmissionReview",
    "DecodeError",
    "ObjectDecodeError",
    "decode_review",
    "encode_review",
]
