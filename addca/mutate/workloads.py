"""Minimal Pod and Job models.

Only the fields the patch builders look at are modelled; everything else in the
embedded object is ignored. Absent and ``null`` collections decode to ``None``
so the builders can tell them apart from an empty list.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from addca.admission.errors import ObjectDecodeError


def _null_as_empty(value: Any) -> Any:
    return {} if value is None else value


class _K8sModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VolumeMount(_K8sModel):
    name: Optional[str] = None
    mount_path: Optional[str] = Field(default=None, alias="mountPath")
    sub_path: Optional[str] = Field(default=None, alias="subPath")
    read_only: Optional[bool] = Field(default=False, alias="readOnly")


class Volume(_K8sModel):
    name: Optional[str] = None


class Container(_K8sModel):
    name: Optional[str] = None
    volume_mounts: Optional[List[VolumeMount]] = Field(default=None, alias="volumeMounts")


class PodSpec(_K8sModel):
    volumes: Optional[List[Volume]] = None
    init_containers: Optional[List[Container]] = Field(default=None, alias="initContainers")
    containers: Optional[List[Container]] = None


class Pod(_K8sModel):
    spec: Annotated[PodSpec, BeforeValidator(_null_as_empty)] = Field(default_factory=PodSpec)


class PodTemplateSpec(_K8sModel):
    spec: Annotated[PodSpec, BeforeValidator(_null_as_empty)] = Field(default_factory=PodSpec)


class JobSpec(_K8sModel):
    template: Annotated[PodTemplateSpec, BeforeValidator(_null_as_empty)] = Field(default_factory=PodTemplateSpec)


class Job(_K8sModel):
    spec: Annotated[JobSpec, BeforeValidator(_null_as_empty)] = Field(default_factory=JobSpec)


Workload = Union[Pod, Job]
WorkloadT = TypeVar("WorkloadT", Pod, Job)


def decode_workload(model: Type[WorkloadT], raw: bytes) -> WorkloadT:
    """Decode ``raw`` object bytes as ``model``, raising :class:`ObjectDecodeError`."""

    label = model.__name__.lower()
    if not raw:
        raise ObjectDecodeError(f"unable to decode {label} object: no object in request")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ObjectDecodeError(f"unable to decode {label} object: {exc}") from exc
    if not isinstance(data, dict):
        raise ObjectDecodeError(f"unable to decode {label} object: not a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ObjectDecodeError(f"unable to decode {label} object: {exc}") from exc


__all__ = [
    "Container",
    "Job",
    "JobSpec",
    "Pod",
    "PodSpec",
    "PodTemplateSpec",
    "Volume",
    "VolumeMount",
    "Workload",
    "decode_workload",
]
