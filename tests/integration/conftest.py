"""Shared factories and fixtures for KubeOwn integration tests.

Builds realistic fetched objects (a Deployment with several managers, a
dry-run result with server-side defaults, a LoadBalancer Service) so the
tests can run whole ownership -> projection pipelines without a cluster.
"""

from __future__ import annotations

import copy
import json

import pytest

from kubeown.models.fields import ManagedFieldsEntry, Operation

# ---------------------------------------------------------------------------
# managedFields helpers
# ---------------------------------------------------------------------------


def container_key(name: str) -> str:
    return "k:" + json.dumps({"name": name}, separators=(",", ":"))


def make_entry(
    manager: str,
    tree: dict[str, object],
    operation: Operation = Operation.APPLY,
    api_version: str = "apps/v1",
    subresource: str = "",
) -> dict[str, object]:
    """A managedFields record in the wire shape returned by the API server."""
    raw: dict[str, object] = {
        "manager": manager,
        "operation": str(operation),
        "apiVersion": api_version,
        "time": "2026-10-01T12:00:00Z",
        "fieldsType": "FieldsV1",
        "fieldsV1": tree,
    }
    if subresource:
        raw["subresource"] = subresource
    return raw


def entries_of(*raw: dict[str, object]) -> list[ManagedFieldsEntry]:
    return [ManagedFieldsEntry.from_dict(r) for r in raw]


# ---------------------------------------------------------------------------
# Object factories
# ---------------------------------------------------------------------------


def make_manifest(
    replicas: int = 3,
    image: str = "nginx:1.25",
    sidecar_first: bool = False,
) -> dict[str, object]:
    """The user-authored Deployment."""
    containers = [
        {"name": "nginx", "image": image, "args": ["-g", "daemon off;"], "env": [{"name": "MODE", "value": "prod"}]},
        {"name": "envoy", "image": "envoyproxy/envoy:v1.29"},
    ]
    if sidecar_first:
        containers.reverse()
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": "web",
            "namespace": "shop",
            "labels": {"app": "web"},
            "annotations": {"team": "storefront"},
        },
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": "web"}},
            "template": {
                "metadata": {"labels": {"app": "web"}},
                "spec": {"containers": containers},
            },
        },
    }


def with_server_defaults(manifest: dict[str, object]) -> dict[str, object]:
    """What the API server returns for ``manifest``: defaults filled in, status added."""
    obj = copy.deepcopy(manifest)
    metadata = obj["metadata"]
    metadata["uid"] = "0b6f7c2e-5d1a-4c1b-9d55-6a0c2b8d9e11"  # type: ignore[index]
    metadata["resourceVersion"] = "81234"  # type: ignore[index]
    metadata["generation"] = 4  # type: ignore[index]
    spec = obj["spec"]
    spec["revisionHistoryLimit"] = 10  # type: ignore[index]
    spec["progressDeadlineSeconds"] = 600  # type: ignore[index]
    spec["strategy"] = {"type": "RollingUpdate", "rollingUpdate": {"maxSurge": "25%", "maxUnavailable": "25%"}}  # type: ignore[index]
    pod_spec = spec["template"]["spec"]  # type: ignore[index]
    pod_spec["restartPolicy"] = "Always"
    pod_spec["dnsPolicy"] = "ClusterFirst"
    for container in pod_spec["containers"]:
        container["imagePullPolicy"] = "IfNotPresent"
        container["terminationMessagePath"] = "/dev/termination-log"
        container["resources"] = {}
    obj["status"] = {"replicas": spec["replicas"], "readyReplicas": spec["replicas"]}  # type: ignore[index]
    return obj


def kubeown_tree(owns_replicas: bool = True) -> dict[str, object]:
    """FieldsV1 recorded for the ``kubeown`` manager after applying make_manifest()."""
    nginx = {
        ".": {},
        "f:name": {},
        "f:image": {},
        "f:args": {},
        "f:env": {container_key("MODE"): {".": {}, "f:name": {}, "f:value": {}}},
    }
    envoy = {".": {}, "f:name": {}, "f:image": {}}
    spec: dict[str, object] = {
        "f:selector": {},
        "f:template": {
            "f:metadata": {"f:labels": {".": {}, "f:app": {}}},
            "f:spec": {"f:containers": {container_key("nginx"): nginx, container_key("envoy"): envoy}},
        },
    }
    if owns_replicas:
        spec["f:replicas"] = {}
    return {
        "f:metadata": {
            "f:labels": {".": {}, "f:app": {}},
            "f:annotations": {".": {}, "f:team": {}},
        },
        "f:spec": spec,
    }


def make_live(
    manifest: dict[str, object] | None = None,
    *extra_entries: dict[str, object],
    owns_replicas: bool = True,
) -> dict[str, object]:
    """A fetched Deployment carrying managedFields for kubeown plus ``extra_entries``."""
    obj = with_server_defaults(manifest if manifest is not None else make_manifest())
    obj["metadata"]["managedFields"] = [  # type: ignore[index]
        make_entry("kubeown", kubeown_tree(owns_replicas)),
        make_entry(
            "kube-controller-manager",
            {"f:status": {"f:replicas": {}, "f:readyReplicas": {}}},
            operation=Operation.UPDATE,
            subresource="status",
        ),
        *extra_entries,
    ]
    return obj


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def manifest() -> dict[str, object]:
    return make_manifest()


@pytest.fixture
def live() -> dict[str, object]:
    return make_live()


@pytest.fixture
def load_balancer_service() -> dict[str, object]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "web", "namespace": "shop"},
        "spec": {"type": "LoadBalancer", "ports": [{"port": 80, "protocol": "TCP", "targetPort": 8080}]},
        "status": {"loadBalancer": {"ingress": [{"ip": "203.0.113.10"}]}},
    }
