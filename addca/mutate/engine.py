"""Admission review in, admission review out.

:func:`mutate` takes the raw request body and returns a ready-to-send response
body, so HTTP handlers do not need to convert anything and tests need no fake
server.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Tuple, Type

from addca.admission.response import assemble_response
from addca.admission.review import AdmissionRequest, decode_review, encode_review
from addca.common.config import InjectorConfig

from .job import build_job_patch
from .patches import PatchOperation
from .pod import build_pod_patch
from .workloads import Job, Pod, Workload, decode_workload

logger = logging.getLogger(__name__)


class WorkloadKind(Enum):
    POD = "Pod"
    JOB = "Job"
    UNKNOWN = ""

    @classmethod
    def of(cls, kind: str) -> "WorkloadKind":
        for member in cls:
            if member is not cls.UNKNOWN and member.value == kind:
                return member
        return cls.UNKNOWN


PatchBuilder = Callable[[Workload, InjectorConfig], List[PatchOperation]]

_HANDLERS: Dict[WorkloadKind, Tuple[Type[Workload], PatchBuilder]] = {
    WorkloadKind.POD: (Pod, build_pod_patch),
    WorkloadKind.JOB: (Job, build_job_patch),
}

_unhandled = set(WorkloadKind) - set(_HANDLERS) - {WorkloadKind.UNKNOWN}
if _unhandled:  # pragma: no cover - guards additions to WorkloadKind
    raise RuntimeError(f"no patch builder registered for {sorted(k.name for k in _unhandled)}")


def build_patch(request: AdmissionRequest, config: InjectorConfig) -> List[PatchOperation]:
    kind = WorkloadKind.of(request.target_kind)
    if kind is WorkloadKind.UNKNOWN:
        logger.debug("kind %r is not patched", request.target_kind)
        return []
    model, builder = _HANDLERS[kind]
    workload = decode_workload(model, request.raw_object)
    return builder(workload, config)


def mutate(body: bytes, config: InjectorConfig, verbose: bool = False) -> bytes:
    """Process one AdmissionReview request body.

    Returns the serialized AdmissionReview carrying the response, or an empty
    body when the review holds no request. Raises
    :class:`~addca.admission.errors.DecodeError` for a malformed envelope and
    :class:`~addca.admission.errors.ObjectDecodeError` for a malformed Pod or
    Job.
    """

    if verbose:
        logger.info("recv: %s", body.decode("utf-8", errors="replace"))
        logger.info(
            "Using config - ConfigMap: %s, Key: %s, CertFile: %s",
            config.bundle_source_name,
            config.bundle_key,
            config.cert_file_name,
        )

    review = decode_review(body)
    request = review.request
    if request is None:
        logger.debug("admission review without request; nothing to do")
        return b""

    operations = build_patch(request, config)
    logger.debug("%s %s: %d patch operation(s)", request.target_kind, request.uid, len(operations))
    review.response = assemble_response(request.uid, operations)
    response_body = encode_review(review)

    if verbose:
        logger.info("resp: %s", response_body.decode("utf-8"))
    return response_body


__all__ = ["WorkloadKind", "build_patch", "mutate"]
