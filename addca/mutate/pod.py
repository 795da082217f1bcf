from __future__ import annotations

import logging
from typing import List

from addca.common.config import InjectorConfig

from .patches import (
    CA_VOLUME_NAME,
    PatchOperation,
    add,
    append_path,
    bundle_file_mount,
    cert_dir_mount,
    create_array,
    has_mount_named,
    has_volume_named,
    trust_bundle_volume,
)
from .workloads import Container, Pod

logger = logging.getLogger(__name__)


def build_pod_patch(pod: Pod, config: InjectorConfig) -> List[PatchOperation]:
    """Return the JSON Patch operations injecting the trust bundle into ``pod``.

    The volume and the init-container mounts are only added when the Pod has no
    ``ca-certificates`` volume yet. Regular containers are checked one by one and
    only receive mounts when they have none named ``ca-certificates``.
    """

    spec = pod.spec
    ops: List[PatchOperation] = []

    if has_volume_named(spec.volumes, CA_VOLUME_NAME):
        logger.debug("pod already has volume %s; skipping volume and init containers", CA_VOLUME_NAME)
    else:
        if spec.volumes is None:
            ops.append(create_array("/spec/volumes"))
        ops.append(add(append_path("/spec/volumes"), trust_bundle_volume(config)))
        # init containers are not checked for existing mounts
        for idx, container in enumerate(spec.init_containers or []):
            mounts_path = f"/spec/initContainers/{idx}/volumeMounts"
            if container.volume_mounts is None:
                ops.append(create_array(mounts_path))
            ops.append(add(append_path(mounts_path), cert_dir_mount()))

    for idx, container in enumerate(spec.containers or []):
        if has_mount_named(container, CA_VOLUME_NAME):
            logger.debug("container %s already mounts %s", container.name or idx, CA_VOLUME_NAME)
            continue
        ops.extend(container_mount_ops(f"/spec/containers/{idx}/volumeMounts", container, config))

    return ops


def container_mount_ops(
    mounts_path: str,
    container: Container,
    config: InjectorConfig,
) -> List[PatchOperation]:
    """Directory and bundle-file mounts for one container."""

    ops: List[PatchOperation] = []
    if container.volume_mounts is None:
        ops.append(create_array(mounts_path))
    ops.append(add(append_path(mounts_path), cert_dir_mount()))
    ops.append(add(append_path(mounts_path), bundle_file_mount(config)))
    return ops


__all__ = ["build_pod_patch", "container_mount_ops"]
