"""Typed JSON Patch (RFC 6902) operations used by the patch builders."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from addca.common.config import InjectorConfig

CA_VOLUME_NAME = "ca-certificates"
CERT_DIR_MOUNT_PATH = "/etc/ssl/certs/"
# SUSE based images read a single bundle file instead of the certs directory
BUNDLE_FILE_MOUNT_PATH = "/var/lib/ca-certificates/ca-bundle.pem"
DEFAULT_FILE_MODE = 0o644


class PatchOp(str, Enum):
    ADD = "add"
    REPLACE = "replace"
    REMOVE = "remove"


@dataclass(frozen=True)
class ConfigMapVolume:
    name: str
    config_map_name: str
    key: str
    path: str
    default_mode: int = DEFAULT_FILE_MODE

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "configMap": {
                "name": self.config_map_name,
                "items": [{"key": self.key, "path": self.path}],
                "defaultMode": self.default_mode,
            },
        }


@dataclass(frozen=True)
class VolumeMountValue:
    name: str
    mount_path: str
    read_only: bool = True
    sub_path: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "mountPath": self.mount_path}
        if self.sub_path is not None:
            data["subPath"] = self.sub_path
        data["readOnly"] = self.read_only
        return data


@dataclass(frozen=True)
class EmptyArray:
    def to_json(self) -> List[Any]:
        return []


PatchValue = Union[ConfigMapVolume, VolumeMountValue, EmptyArray]


@dataclass(frozen=True)
class PatchOperation:
    op: PatchOp
    path: str
    value: Optional[PatchValue] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"op": self.op.value, "path": self.path}
        if self.op is not PatchOp.REMOVE:
            data["value"] = self.value.to_json() if self.value is not None else None
        return data


def add(path: str, value: PatchValue) -> PatchOperation:
    return PatchOperation(PatchOp.ADD, path, value)


def create_array(path: str) -> PatchOperation:
    return PatchOperation(PatchOp.ADD, path, EmptyArray())


def append_path(array_path: str) -> str:
    return f"{array_path}/-"


def trust_bundle_volume(config: InjectorConfig) -> ConfigMapVolume:
    return ConfigMapVolume(
        name=CA_VOLUME_NAME,
        config_map_name=config.bundle_source_name,
        key=config.bundle_key,
        path=config.cert_file_name,
    )


def cert_dir_mount() -> VolumeMountValue:
    return VolumeMountValue(name=CA_VOLUME_NAME, mount_path=CERT_DIR_MOUNT_PATH)


def bundle_file_mount(config: InjectorConfig) -> VolumeMountValue:
    return VolumeMountValue(
        name=CA_VOLUME_NAME,
        mount_path=BUNDLE_FILE_MOUNT_PATH,
        sub_path=config.cert_file_name,
    )


def has_volume_named(volumes: Optional[Iterable[Any]], name: str) -> bool:
    return any(getattr(volume, "name", None) == name for volume in volumes or ())


def has_mount_named(container: Any, name: str) -> bool:
    mounts = getattr(container, "volume_mounts", None)
    return any(getattr(mount, "name", None) == name for mount in mounts or ())


def serialize_patch(operations: Sequence[PatchOperation]) -> bytes:
    return json.dumps([operation.to_dict() for operation in operations]).encode("utf-8")


__all__ = [
    "BUNDLE_FILE_MOUNT_PATH",
    "CA_VOLUME_NAME",
    "CERT_DIR_MOUNT_PATH",
    "ConfigMapVolume",
    "DEFAULT_FILE_MODE",
    "EmptyArray",
    "PatchOp",
    "PatchOperation",
    "PatchValue",
    "VolumeMountValue",
    "add",
    "append_path",
    "bundle_file_mount",
    "cert_dir_mount",
    "create_array",
    "has_mount_named",
    "has_volume_named",
    "serialize_patch",
    "trust_bundle_volume",
]
