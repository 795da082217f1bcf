from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeError

DEFAULT_API_VERSION = "admission.k8s.io/v1beta1"
REVIEW_KIND = "AdmissionReview"


class GroupVersionKind(BaseModel):
    model_config = ConfigDict(extra="allow")

    group: Optional[str] = None
    version: Optional[str] = None
    kind: str


class AdmissionRequest(BaseModel):
    """The ``request`` member of an AdmissionReview.

    Only ``uid`` and ``kind`` are interpreted; every other member is kept so the
    reply can echo the request back unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uid: str
    kind: GroupVersionKind
    object_: Optional[Any] = Field(default=None, alias="object")

    @property
    def target_kind(self) -> str:
        return self.kind.kind

    @property
    def raw_object(self) -> bytes:
        if self.object_ is None:
            return b""
        return json.dumps(self.object_).encode("utf-8")


class Status(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str


class AdmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    allowed: bool
    patch_type: str = Field(alias="patchType")
    audit_annotations: Dict[str, str] = Field(default_factory=dict, alias="auditAnnotations")
    patch: str = Field(..., description="Base64 encoded JSON Patch document")
    result: Status = Field(alias="status")


class AdmissionReview(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    kind: Optional[str] = None
    request: Optional[AdmissionRequest] = None
    response: Optional[AdmissionResponse] = None


def decode_review(body: bytes) -> AdmissionReview:
    """Parse raw request bytes into an :class:`AdmissionReview`."""

    try:
        data = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"unmarshaling request failed with {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError("unmarshaling request failed: top level is not an object")
    try:
        return AdmissionReview.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(f"unmarshaling request failed with {exc}") from exc


def encode_review(review: AdmissionReview) -> bytes:
    dumped = review.model_dump(mode="json", by_alias=True)
    payload = {key: value for key, value in dumped.items() if value is not None}
    payload["apiVersion"] = review.api_version or DEFAULT_API_VERSION
    payload["kind"] = review.kind or REVIEW_KIND
    return json.dumps(payload).encode("utf-8")


__all__ = [
    "AdmissionRequest",
    "AdmissionResponse",
    "AdmissionReview",
    "DEFAULT_API_VERSION",
    "GroupVersionKind",
    "REVIEW_KIND",
    "Status",
    "decode_review",
    "encode_review",
]
