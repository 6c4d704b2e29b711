"""Tests for count / for_each expansion."""

import pytest

from terraplan.core.errors import (
    ExpansionLimitExceededError,
    InvalidCountError,
    InvalidForEachKeyError,
)
from terraplan.core.models import CountExpansion, ResourceDeclaration
from terraplan.engine import DeclarationStore, expand, expand_all


def _decl(type_: str = "aws_instance", name: str = "web", **kwargs) -> ResourceDeclaration:
    return ResourceDeclaration.model_validate({"type": type_, "name": name, **kwargs})


def _keys(instances) -> list:
    return [inst.key for inst in instances]


class TestNoStrategy:
    def test_single_unkeyed_instance(self):
        instances = expand(_decl(attributes={"ami": "ami-123"}))
        assert len(instances) == 1
        assert instances[0].key is None
        assert str(instances[0].address) == "aws_instance.web"
        assert instances[0].attributes == {"ami": "ami-123"}


class TestCount:
    def test_indexes(self):
        instances = expand(_decl(count=3))
        assert _keys(instances) == [0, 1, 2]
        assert [str(i) for i in instances] == [
            "aws_instance.web[0]",
            "aws_instance.web[1]",
            "aws_instance.web[2]",
        ]

    def test_zero_count(self):
        assert expand(_decl(count=0)) == []

    def test_negative_count(self):
        with pytest.raises(InvalidCountError) as exc_info:
            expand(_decl(count=-1))
        assert exc_info.value.count == -1
        assert str(exc_info.value.declaration) == "aws_instance.web"

    def test_bool_count_rejected(self):
        decl = _decl().model_copy(update={"expansion": CountExpansion.model_construct(count=True)})
        with pytest.raises(InvalidCountError):
            expand(decl)

    def test_count_index_rendered(self):
        instances = expand(
            _decl(count=2, attributes={"name": "web-${count.index}", "slot": "${count.index}"})
        )
        assert instances[0].attributes == {"name": "web-0", "slot": 0}
        assert instances[1].attributes == {"name": "web-1", "slot": 1}

    def test_limit(self):
        with pytest.raises(ExpansionLimitExceededError) as exc_info:
            expand(_decl(count=11), max_instances=10)
        assert exc_info.value.limit == 10

    def test_limit_disabled(self):
        assert len(expand(_decl(count=20), max_instances=None)) == 20


class TestForEach:
    def test_map_keys_sorted(self):
        instances = expand(_decl(for_each={"prod": "p", "dev": "d"}))
        assert _keys(instances) == ["dev", "prod"]
        assert [inst.each_value for inst in instances] == ["d", "p"]

    def test_set_of_strings(self):
        instances = expand(_decl(for_each=["prod", "dev"]))
        assert _keys(instances) == ["dev", "prod"]
        assert [inst.each_value for inst in instances] == ["dev", "prod"]

    def test_each_rendered(self):
        instances = expand(
            _decl(
                for_each={"dev": {"size": "small"}},
                attributes={"name": "web-${each.key}", "config": "${each.value}"},
            )
        )
        assert instances[0].attributes == {
            "name": "web-dev",
            "config": {"size": "small"},
        }

    def test_each_value_is_copied(self):
        decl = _decl(for_each={"dev": {"size": "small"}})
        instances = expand(decl)
        instances[0].each_value["size"] = "large"
        assert decl.expansion.for_each["dev"] == {"size": "small"}

    def test_empty(self):
        with pytest.raises(InvalidForEachKeyError, match="empty"):
            expand(_decl(for_each={}))

    def test_non_string_key(self):
        with pytest.raises(InvalidForEachKeyError, match="keys must be strings"):
            expand(_decl(for_each=[1, 2]))

    def test_duplicate_set_items(self):
        with pytest.raises(InvalidForEachKeyError, match="duplicate keys: dev"):
            expand(_decl(for_each=["dev", "prod", "dev"]))

    def test_limit(self):
        with pytest.raises(ExpansionLimitExceededError):
            expand(_decl(for_each=["a", "b", "c"]), max_instances=2)


class TestExpandAll:
    def test_keyed_by_declaration(self):
        store = DeclarationStore([_decl("a", "x", count=2), _decl("b", "y")])
        expansions = expand_all(store)
        assert [str(a) for a in expansions] == ["a.x", "b.y"]
        assert len(expansions[store.get("a.x").address]) == 2
        assert len(expansions[store.get("b.y").address]) == 1
