from __future__ import annotations

import base64
from typing import Dict, Sequence

from addca.mutate.patches import PatchOperation, serialize_patch

from .review import AdmissionResponse, Status

PATCH_TYPE_JSON_PATCH = "JSONPatch"
# helpful to know why an object was modified
AUDIT_ANNOTATIONS: Dict[str, str] = {"mutateme": "yup it did it"}


def assemble_response(uid: str, operations: Sequence[PatchOperation]) -> AdmissionResponse:
    """Wrap ``operations`` into an allowing AdmissionResponse for ``uid``.

    The webhook never denies: it only tells the API server how to modify the
    object.
    """

    patch = base64.b64encode(serialize_patch(operations)).decode("ascii")
    return AdmissionResponse(
        uid=uid,
        allowed=True,
        patch_type=PATCH_TYPE_JSON_PATCH,
        audit_annotations=dict(AUDIT_ANNOTATIONS),
        patch=patch,
        result=Status(status="Success"),
    )


__all__ = ["AUDIT_ANNOTATIONS", "PATCH_TYPE_JSON_PATCH", "assemble_response"]
