import unittest

import jsonpatch
import yaml

from addca.common.config import InjectorConfig
from addca.mutate.patches import (
    BUNDLE_FILE_MOUNT_PATH,
    CERT_DIR_MOUNT_PATH,
    PatchOp,
    has_mount_named,
    has_volume_named,
)
from addca.mutate.pod import build_pod_patch
from addca.mutate.workloads import Pod

FRESH_POD = """
apiVersion: v1
kind: Pod
metadata:
  name: fresh
spec:
  volumes:
    - name: data
      emptyDir: {}
  initContainers:
    - name: setup
      image: busybox:1.36
    - name: migrate
      image: busybox:1.36
      volumeMounts:
        - name: data
          mountPath: /data
  containers:
    - name: web
      image: nginx:1.25
      volumeMounts:
        - name: data
          mountPath: /data
    - name: sidecar
      image: busybox:1.36
      volumeMounts: []
"""

PATCHED_VOLUME_POD = """
apiVersion: v1
kind: Pod
metadata:
  name: has-volume
spec:
  volumes:
    - name: ca-certificates
      configMap:
        name: trust-bundle
  initContainers:
    - name: setup
      image: busybox:1.36
  containers:
    - name: web
      image: nginx:1.25
      volumeMounts: []
"""

FIRST_CONTAINER_MOUNTED_POD = """
apiVersion: v1
kind: Pod
metadata:
  name: half-patched
spec:
  volumes:
    - name: data
      emptyDir: {}
  containers:
    - name: web
      image: nginx:1.25
      volumeMounts:
        - name: ca-certificates
          mountPath: /etc/ssl/certs/
          readOnly: true
    - name: worker
      image: busybox:1.36
      volumeMounts:
        - name: data
          mountPath: /data
"""

BARE_POD = """
apiVersion: v1
kind: Pod
metadata:
  name: bare
spec:
  containers:
    - name: web
      image: nginx:1.25
"""


def _load(manifest: str) -> dict:
    return yaml.safe_load(manifest)


def _pod(manifest: str) -> Pod:
    return Pod.model_validate(_load(manifest))


def _dicts(ops) -> list:
    return [op.to_dict() for op in ops]


class PodPatchBuilderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = InjectorConfig(
            bundle_source_name="cluster-ca",
            bundle_key="ca.pem",
            cert_file_name="bundle.crt",
        )

    def test_fresh_pod_gets_volume_and_all_mounts(self) -> None:
        ops = _dicts(build_pod_patch(_pod(FRESH_POD), self.config))

        volume_ops = [op for op in ops if op["path"] == "/spec/volumes/-"]
        self.assertEqual(len(volume_ops), 1)
        self.assertEqual(
            volume_ops[0]["value"],
            {
                "name": "ca-certificates",
                "configMap": {
                    "name": "cluster-ca",
                    "items": [{"key": "ca.pem", "path": "bundle.crt"}],
                    "defaultMode": 420,
                },
            },
        )
        for idx in (0, 1):
            container_ops = [op for op in ops if op["path"] == f"/spec/containers/{idx}/volumeMounts/-"]
            self.assertEqual(len(container_ops), 2)
            self.assertEqual(container_ops[0]["value"]["mountPath"], CERT_DIR_MOUNT_PATH)
            self.assertEqual(container_ops[1]["value"]["mountPath"], BUNDLE_FILE_MOUNT_PATH)
            self.assertEqual(container_ops[1]["value"]["subPath"], "bundle.crt")
            self.assertTrue(all(op["value"]["readOnly"] for op in container_ops))
        for idx in (0, 1):
            init_ops = [op for op in ops if op["path"] == f"/spec/initContainers/{idx}/volumeMounts/-"]
            self.assertEqual(len(init_ops), 1)
            self.assertEqual(
                init_ops[0]["value"],
                {"name": "ca-certificates", "mountPath": "/etc/ssl/certs/", "readOnly": True},
            )

    def test_null_init_container_mounts_get_array_first(self) -> None:
        ops = _dicts(build_pod_patch(_pod(FRESH_POD), self.config))
        paths = [op["path"] for op in ops]
        create = paths.index("/spec/initContainers/0/volumeMounts")
        append = paths.index("/spec/initContainers/0/volumeMounts/-")
        self.assertLess(create, append)
        self.assertEqual(ops[create]["value"], [])
        # the second init container already has a list
        self.assertNotIn("/spec/initContainers/1/volumeMounts", paths)

    def test_existing_volume_skips_volume_and_init_containers(self) -> None:
        ops = _dicts(build_pod_patch(_pod(PATCHED_VOLUME_POD), self.config))
        paths = [op["path"] for op in ops]
        self.assertFalse(any(path.startswith("/spec/volumes") for path in paths))
        self.assertFalse(any(path.startswith("/spec/initContainers") for path in paths))
        # containers are still checked on their own
        self.assertEqual(paths, ["/spec/containers/0/volumeMounts/-"] * 2)

    def test_mount_check_is_per_container(self) -> None:
        ops = _dicts(build_pod_patch(_pod(FIRST_CONTAINER_MOUNTED_POD), self.config))
        container_paths = [op["path"] for op in ops if op["path"].startswith("/spec/containers/")]
        self.assertEqual(container_paths, ["/spec/containers/1/volumeMounts/-"] * 2)

    def test_mounted_second_container_does_not_hide_first(self) -> None:
        manifest = _load(FIRST_CONTAINER_MOUNTED_POD)
        containers = manifest["spec"]["containers"]
        manifest["spec"]["containers"] = [containers[1], containers[0]]
        ops = _dicts(build_pod_patch(Pod.model_validate(manifest), self.config))
        container_paths = [op["path"] for op in ops if op["path"].startswith("/spec/containers/")]
        self.assertEqual(container_paths, ["/spec/containers/0/volumeMounts/-"] * 2)

    def test_all_ops_are_add(self) -> None:
        ops = build_pod_patch(_pod(FRESH_POD), self.config)
        self.assertTrue(ops)
        self.assertTrue(all(op.op is PatchOp.ADD for op in ops))

    def test_patch_applies_to_bare_pod(self) -> None:
        manifest = _load(BARE_POD)
        ops = _dicts(build_pod_patch(Pod.model_validate(manifest), self.config))
        self.assertEqual(ops[0], {"op": "add", "path": "/spec/volumes", "value": []})
        patched = jsonpatch.apply_patch(manifest, ops, in_place=False)
        self.assertEqual(patched["spec"]["volumes"][0]["configMap"]["name"], "cluster-ca")
        mounts = patched["spec"]["containers"][0]["volumeMounts"]
        self.assertEqual([m["mountPath"] for m in mounts], [CERT_DIR_MOUNT_PATH, BUNDLE_FILE_MOUNT_PATH])

    def test_patched_pod_is_left_alone(self) -> None:
        manifest = _load(FRESH_POD)
        ops = _dicts(build_pod_patch(Pod.model_validate(manifest), self.config))
        patched = jsonpatch.apply_patch(manifest, ops, in_place=False)
        self.assertEqual(build_pod_patch(Pod.model_validate(patched), self.config), [])

    def test_pod_without_containers(self) -> None:
        ops = _dicts(build_pod_patch(Pod.model_validate({"spec": {"volumes": []}}), self.config))
        self.assertEqual([op["path"] for op in ops], ["/spec/volumes/-"])


class PredicateTests(unittest.TestCase):
    def test_has_volume_named(self) -> None:
        pod = _pod(PATCHED_VOLUME_POD)
        self.assertTrue(has_volume_named(pod.spec.volumes, "ca-certificates"))
        self.assertFalse(has_volume_named(pod.spec.volumes, "data"))
        self.assertFalse(has_volume_named(None, "ca-certificates"))

    def test_has_mount_named(self) -> None:
        pod = _pod(FIRST_CONTAINER_MOUNTED_POD)
        first, second = pod.spec.containers
        self.assertTrue(has_mount_named(first, "ca-certificates"))
        self.assertFalse(has_mount_named(second, "ca-certificates"))
        self.assertFalse(has_mount_named(_pod(BARE_POD).spec.containers[0], "ca-certificates"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
