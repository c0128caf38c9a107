"""Tests for merge-key parsing/matching and the array addressing policy."""

from __future__ import annotations

import json
from types import MappingProxyType

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from kubeown.errors import MergeKeyError
from kubeown.ownership.mergekeys import MergeKey, find_merge_key_index
from kubeown.ownership.policy import (
    DEFAULT_POLICY,
    STRATEGIC_MERGE_KEYS,
    ArrayAddressing,
    ArrayAddressingPolicy,
    classify_array,
)
from kubeown.paths.selectors import ArraySelector, SelectorKind

# =====================================================================
# MergeKey
# =====================================================================


class TestMergeKeyParse:
    def test_parses_with_prefix(self) -> None:
        key = MergeKey.parse('k:{"name":"nginx"}')
        assert key.as_dict() == {"name": "nginx"}

    def test_prefix_is_optional(self) -> None:
        assert MergeKey.parse('{"name":"nginx"}') == MergeKey.parse('k:{"name":"nginx"}')

    def test_pairs_are_sorted(self) -> None:
        key = MergeKey.parse('k:{"protocol":"TCP","containerPort":80}')
        assert key.pairs == (("containerPort", 80), ("protocol", "TCP"))

    @pytest.mark.parametrize(
        "token",
        ["k:not-json", 'k:{"name":', "k:[1,2]", 'k:"nginx"', "k:{}", "k:"],
    )
    def test_invalid_tokens_raise(self, token: str) -> None:
        with pytest.raises(MergeKeyError):
            MergeKey.parse(token)


class TestMergeKeyMatch:
    def test_matches_single_field(self) -> None:
        assert MergeKey.parse('k:{"name":"nginx"}').matches({"name": "nginx", "image": "nginx:1"})

    def test_requires_every_field(self) -> None:
        key = MergeKey.parse('k:{"containerPort":80,"protocol":"TCP"}')
        assert key.matches({"containerPort": 80, "protocol": "TCP"})
        assert not key.matches({"containerPort": 80})
        assert not key.matches({"containerPort": 80, "protocol": "UDP"})

    def test_numeric_forms_compare_equal(self) -> None:
        key = MergeKey.parse('k:{"containerPort":80}')
        assert key.matches({"containerPort": 80.0})
        assert key.matches({"containerPort": "80"})

    def test_non_mapping_never_matches(self) -> None:
        key = MergeKey.parse('k:{"name":"a"}')
        assert not key.matches("a")
        assert not key.matches(None)

    def test_find_index_returns_first_match(self) -> None:
        items: list[object] = [{"name": "a"}, {"name": "b"}, {"name": "b", "x": 1}]
        assert MergeKey.parse('k:{"name":"b"}').find_index(items) == 1

    def test_find_index_absent(self) -> None:
        assert MergeKey.parse('k:{"name":"z"}').find_index([{"name": "a"}]) is None

    def test_find_merge_key_index_swallows_bad_tokens(self) -> None:
        assert find_merge_key_index("k:{bad", [{"name": "a"}]) is None
        assert find_merge_key_index('k:{"name":"a"}', [{"name": "a"}]) == 0

    @given(
        names=st.lists(st.from_regex(r"[a-z]{1,8}", fullmatch=True), min_size=1, max_size=8, unique=True),
        data=st.data(),
    )
    @settings(max_examples=50)
    def test_resolution_is_order_independent(self, names: list[str], data: st.DataObject) -> None:
        items: list[object] = [{"name": n, "image": f"{n}:latest"} for n in names]
        shuffled = data.draw(st.permutations(items))
        target = data.draw(st.sampled_from(names))
        key = MergeKey.parse("k:" + json.dumps({"name": target}))

        i = key.find_index(items)
        j = key.find_index(list(shuffled))
        assert i is not None and j is not None
        assert items[i] == shuffled[j]


# =====================================================================
# ArrayAddressingPolicy
# =====================================================================


class TestArrayAddressingPolicy:
    @pytest.mark.parametrize("name", ["containers", "volumes", "env", "volumeMounts", "initContainers"])
    def test_keyed_fields(self, name: str) -> None:
        assert classify_array(name) is ArrayAddressing.KEYED
        assert DEFAULT_POLICY.merge_key(name) == "name"

    @pytest.mark.parametrize("name", ["args", "command"])
    def test_positional_fields(self, name: str) -> None:
        assert classify_array(name) is ArrayAddressing.POSITIONAL

    @pytest.mark.parametrize("name", ["ports", "tolerations", "finalizers", "rules", "items"])
    def test_everything_else_is_opaque(self, name: str) -> None:
        assert classify_array(name) is ArrayAddressing.OPAQUE
        assert DEFAULT_POLICY.merge_key(name) is None

    def test_selector_for_keyed_element(self) -> None:
        selector = DEFAULT_POLICY.selector_for("containers", {"name": "nginx"}, 4)
        assert selector == ArraySelector.keyed("name", "nginx")

    @pytest.mark.parametrize("element", [{"image": "nginx"}, {"name": ""}, {"name": None}, "nginx"])
    def test_keyed_element_without_usable_key_falls_back_to_empty(self, element: object) -> None:
        assert DEFAULT_POLICY.selector_for("containers", element, 0).kind is SelectorKind.EMPTY

    def test_selector_for_positional_element(self) -> None:
        assert DEFAULT_POLICY.selector_for("args", "--verbose", 2) == ArraySelector.positional(2)

    def test_selector_for_opaque_array(self) -> None:
        assert DEFAULT_POLICY.selector_for("ports", {"containerPort": 80}, 0) == ArraySelector.empty()

    def test_custom_policy(self) -> None:
        policy = ArrayAddressingPolicy(keyed={"listeners": "port"}, positional=frozenset({"steps"}))
        assert policy.classify("listeners") is ArrayAddressing.KEYED
        assert policy.classify("containers") is ArrayAddressing.OPAQUE
        assert policy.selector_for("listeners", {"port": 443}, 0) == ArraySelector.keyed("port", "443")

    def test_tables_are_read_only(self) -> None:
        source = {"listeners": "port"}
        policy = ArrayAddressingPolicy(keyed=source)
        source["routes"] = "name"
        assert policy.classify("routes") is ArrayAddressing.OPAQUE
        assert isinstance(policy.keyed, MappingProxyType)
        assert isinstance(STRATEGIC_MERGE_KEYS, MappingProxyType)
        with pytest.raises(TypeError):
            policy.keyed["routes"] = "name"  # type: ignore[index]
