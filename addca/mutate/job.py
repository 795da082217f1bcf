from __future__ import annotations

from typing import List

from addca.common.config import InjectorConfig

from .patches import PatchOperation, add, append_path, create_array, trust_bundle_volume
from .pod import container_mount_ops
from .workloads import Job

TEMPLATE_SPEC_PATH = "/spec/template/spec"


def build_job_patch(job: Job, config: InjectorConfig) -> List[PatchOperation]:
    """Return the JSON Patch operations injecting the trust bundle into a Job template.

    Unlike :func:`addca.mutate.pod.build_pod_patch` this does not look for an
    existing ``ca-certificates`` volume or mount: running it against an already
    patched Job produces duplicate entries. Template init containers are left
    alone.
    """

    # TODO: add the existing volume/mount checks once the maintainers confirm the
    # duplicate entries on re-admitted Jobs are unintended.
    spec = job.spec.template.spec
    volumes_path = f"{TEMPLATE_SPEC_PATH}/volumes"
    ops: List[PatchOperation] = []

    if spec.volumes is None:
        ops.append(create_array(volumes_path))
    ops.append(add(append_path(volumes_path), trust_bundle_volume(config)))

    for idx, container in enumerate(spec.containers or []):
        ops.extend(
            container_mount_ops(f"{TEMPLATE_SPEC_PATH}/containers/{idx}/volumeMounts", container, config)
        )
    return ops


__all__ = ["TEMPLATE_SPEC_PATH", "build_job_patch"]
