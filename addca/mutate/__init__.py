"""Patch builders for Pods and Jobs.

The engine entry point lives in :mod:`addca.mutate.engine`.
"""

from .patches import PatchOp, PatchOperation, has_mount_named, has_volume_named
from .workloads import Job, Pod

__all__ = [
    "Job",
    "PatchOp",
    "PatchOperation",
    "Pod",
    "has_mount_named",
    "has_volume_named",
]
