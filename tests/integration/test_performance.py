"""Performance and depth-bound tests.

All tests are marked with @pytest.mark.performance. They enforce generous
wall-clock budgets on large objects and check that pathological nesting is
cut off at the configured depth instead of exhausting the stack.
"""

from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest

from kubeown.errors import ProjectionError
from kubeown.models.config import DEFAULT_MAX_DEPTH
from kubeown.models.fields import ManagedFieldsEntry, Operation
from kubeown.ownership.accumulator import manifest_paths, owned_paths
from kubeown.ownership.extractor import extract_owned_paths
from kubeown.paths.segments import FieldPath
from kubeown.projection.projector import project_fields

from .conftest import container_key

pytestmark = [pytest.mark.integration, pytest.mark.performance]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _large_pod(containers: int = 200, env_vars: int = 10) -> tuple[dict[str, object], dict[str, object]]:
    """A pod spec with many containers and its matching FieldsV1 tree."""
    specs = []
    tree_containers: dict[str, object] = {}
    for c in range(containers):
        name = f"worker-{c}"
        env = [{"name": f"VAR_{e}", "value": str(e)} for e in range(env_vars)]
        specs.append({"name": name, "image": f"registry.local/worker:{c}", "env": env})
        tree_containers[container_key(name)] = {
            ".": {},
            "f:name": {},
            "f:image": {},
            "f:env": {container_key(f"VAR_{e}"): {".": {}, "f:name": {}, "f:value": {}} for e in range(env_vars)},
        }
    obj = {"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "batch"}, "spec": {"containers": specs}}
    return obj, {"f:spec": {"f:containers": tree_containers}}


def _nested(levels: int, leaf: object) -> tuple[dict[str, object], dict[str, object]]:
    """A ``levels``-deep object and the FieldsV1 tree owning its leaf."""
    obj: dict[str, object] = {}
    tree: dict[str, object] = {}
    node, tnode = obj, tree
    for i in range(levels - 1):
        child: dict[str, object] = {}
        tchild: dict[str, object] = {}
        node[f"l{i}"] = child
        tnode[f"f:l{i}"] = tchild
        node, tnode = child, tchild
    node[f"l{levels - 1}"] = leaf
    tnode[f"f:l{levels - 1}"] = {}
    return obj, tree


# ---------------------------------------------------------------------------
# Large objects
# ---------------------------------------------------------------------------


def test_large_pod_extraction_and_projection_under_budget() -> None:
    obj, tree = _large_pod()
    entries = [ManagedFieldsEntry(manager="kubeown", fields_v1=tree)]

    start = time.perf_counter()
    ownership = owned_paths(entries, "kubeown", reference=obj)
    projection = project_fields(obj, ownership)
    elapsed = time.perf_counter() - start

    # 200 containers x (name + image + 10 env x (name + value)) plus identity
    assert len(ownership) == 200 * 22 + 4
    assert projection["spec"] == obj["spec"]
    assert elapsed < 2.0, f"extraction + projection took {elapsed:.3f}s"


def test_large_manifest_fallback_under_budget() -> None:
    obj, _ = _large_pod(containers=100)

    start = time.perf_counter()
    ownership = owned_paths([], "kubeown", reference=obj, manifest=obj)
    projection = project_fields(obj, ownership)
    elapsed = time.perf_counter() - start

    assert ownership.from_manifest
    assert projection["spec"] == obj["spec"]
    assert elapsed < 2.0, f"fallback + projection took {elapsed:.3f}s"


# ---------------------------------------------------------------------------
# Depth bound
# ---------------------------------------------------------------------------


class TestDepthBound:
    def test_extraction_collapses_at_max_depth(self) -> None:
        obj, tree = _nested(150, "deep")
        paths = extract_owned_paths(tree, obj)
        assert len(paths) == 1
        (path,) = paths
        assert len(path) == DEFAULT_MAX_DEPTH
        assert path == FieldPath.of(*(f"l{i}" for i in range(DEFAULT_MAX_DEPTH)))

    def test_manifest_walk_collapses_at_max_depth(self) -> None:
        obj, _ = _nested(150, "deep")
        paths = manifest_paths(obj)
        assert {len(p) for p in paths} == {DEFAULT_MAX_DEPTH}

    def test_collapsed_path_projects_whole_subtree(self) -> None:
        obj, tree = _nested(150, "deep")
        paths = extract_owned_paths(tree, obj)
        assert project_fields(obj, paths) == obj

    def test_projector_rejects_paths_beyond_bound(self) -> None:
        obj, _ = _nested(80, "deep")
        too_long = FieldPath.of(*(f"l{i}" for i in range(DEFAULT_MAX_DEPTH + 1)))
        with pytest.raises(ProjectionError, match=f"more than {DEFAULT_MAX_DEPTH} segments"):
            project_fields(obj, [too_long])

    def test_configured_bound(self) -> None:
        obj, tree = _nested(20, "deep")
        paths = extract_owned_paths(tree, obj, max_depth=8)
        assert {len(p) for p in paths} == {8}

    def test_deeply_nested_fields_text_is_skipped_as_malformed(self) -> None:
        levels = 100_000
        log = MagicMock()
        entries = [
            ManagedFieldsEntry(manager="kubeown", fields_v1='{"f:a":' * levels + "{}" + "}" * levels),
            ManagedFieldsEntry(manager="kubeown", fields_v1='{"f:spec":{"f:replicas":{}}}'),
        ]
        ownership = owned_paths(entries, "kubeown", reference={}, logger=log)
        assert not ownership.from_manifest
        assert "spec.replicas" in ownership
        log.warning.assert_called_once()
        assert log.warning.call_args.args[0] == "fields_v1_decode_failed"

    def test_deep_decoded_trees_merge_and_collapse(self) -> None:
        _, tree = _nested(5000, None)
        entries = [
            ManagedFieldsEntry(manager="kubeown", fields_v1=tree),
            ManagedFieldsEntry(manager="kubeown", fields_v1=tree, operation=Operation.UPDATE),
        ]
        ownership = owned_paths(entries, "kubeown", reference={})
        assert FieldPath.of(*(f"l{i}" for i in range(DEFAULT_MAX_DEPTH))) in ownership

    def test_projection_copies_subtrees_deeper_than_the_stack(self) -> None:
        levels = 5000
        deep, _ = _nested(levels, "deep")
        projection = project_fields({"spec": deep}, ["spec"])

        copied, original, depth = projection["spec"], deep, 0
        while isinstance(copied, dict):
            assert copied is not original
            key = f"l{depth}"
            copied, original, depth = copied[key], original[key], depth + 1  # type: ignore[index]
        assert copied == "deep"
        assert depth == levels
