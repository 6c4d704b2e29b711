"""Tests for address, declaration and plan models."""

import pytest
from pydantic import ValidationError

from terraplan.core.models import (
    ConfigurationSpec,
    CountExpansion,
    ExecutionPlan,
    ForEachExpansion,
    InstanceAddress,
    ResourceAddress,
    ResourceDeclaration,
    ResourceInstance,
)


def _addr(text: str) -> ResourceAddress:
    return ResourceAddress.parse(text)


class TestResourceAddress:
    def test_parse_string(self):
        address = _addr("aws_instance.web")
        assert address.type == "aws_instance"
        assert address.name == "web"
        assert str(address) == "aws_instance.web"

    def test_parse_unwraps_interpolation(self):
        assert _addr("${aws_vpc.main}") == _addr("aws_vpc.main")

    def test_parse_passes_address_through(self):
        address = _addr("aws_vpc.main")
        assert ResourceAddress.parse(address) is address

    @pytest.mark.parametrize("text", ["aws_instance", "a.b.c", "1bad.name", ""])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            _addr(text)

    def test_hashable_and_equal(self):
        assert {_addr("a.b"), _addr("a.b")} == {_addr("a.b")}


class TestInstanceAddress:
    def test_str_forms(self):
        resource = _addr("aws_instance.web")
        assert str(InstanceAddress(resource=resource)) == "aws_instance.web"
        assert str(InstanceAddress(resource=resource, key=0)) == "aws_instance.web[0]"
        assert (
            str(InstanceAddress(resource=resource, key="dev"))
            == 'aws_instance.web["dev"]'
        )

    def test_integer_keys_sort_numerically(self):
        resource = _addr("aws_instance.web")
        keys = [10, 2, 0]
        addresses = [InstanceAddress(resource=resource, key=k) for k in keys]
        ordered = sorted(addresses, key=lambda a: a.sort_key)
        assert [a.key for a in ordered] == [0, 2, 10]

    def test_declaration_address_sorts_first(self):
        a = InstanceAddress(resource=_addr("a.z"), key=5)
        b = InstanceAddress(resource=_addr("b.a"), key=0)
        assert a.sort_key < b.sort_key


class TestResourceDeclaration:
    def test_plain_declaration(self):
        decl = ResourceDeclaration(type="aws_vpc", name="main")
        assert decl.expansion is None
        assert decl.strategy == "none"
        assert decl.address == _addr("aws_vpc.main")

    def test_count_is_lifted(self):
        decl = ResourceDeclaration.model_validate(
            {"type": "aws_instance", "name": "web", "count": 3}
        )
        assert isinstance(decl.expansion, CountExpansion)
        assert decl.expansion.count == 3
        assert decl.strategy == "count"

    def test_for_each_is_lifted(self):
        decl = ResourceDeclaration.model_validate(
            {"type": "aws_s3_bucket", "name": "env", "for_each": {"dev": 1}}
        )
        assert isinstance(decl.expansion, ForEachExpansion)
        assert decl.strategy == "for_each"

    def test_count_and_for_each_are_exclusive(self):
        with pytest.raises(ValidationError, match="mutually exclusive"):
            ResourceDeclaration.model_validate(
                {"type": "a", "name": "b", "count": 1, "for_each": ["x"]}
            )

    def test_explicit_expansion_field(self):
        decl = ResourceDeclaration(
            type="a", name="b", expansion={"kind": "count", "count": 2}
        )
        assert decl.expansion == CountExpansion(count=2)

    def test_depends_on_accepts_strings(self):
        decl = ResourceDeclaration(type="a", name="b", depends_on=["c.d"])
        assert decl.depends_on == [_addr("c.d")]

    def test_invalid_identifier(self):
        with pytest.raises(ValidationError):
            ResourceDeclaration(type="bad type", name="x")

    def test_non_integer_count_rejected(self):
        with pytest.raises(ValidationError):
            ResourceDeclaration.model_validate({"type": "a", "name": "b", "count": "many"})

    @pytest.mark.parametrize("count", [True, 2.5, "3"])
    def test_count_must_be_strict_integer(self, count):
        with pytest.raises(ValidationError):
            ResourceDeclaration.model_validate({"type": "a", "name": "b", "count": count})


class TestConfigurationSpec:
    def test_file_shape(self):
        config = ConfigurationSpec.model_validate(
            {
                "resources": [
                    {"type": "aws_vpc", "name": "main"},
                    {
                        "type": "aws_subnet",
                        "name": "private",
                        "count": 2,
                        "depends_on": ["aws_vpc.main"],
                        "attributes": {"vpc_id": "${aws_vpc.main.id}"},
                    },
                ]
            }
        )
        assert [str(r.address) for r in config.resources] == [
            "aws_vpc.main",
            "aws_subnet.private",
        ]
        assert config.resources[1].expansion == CountExpansion(count=2)

    def test_empty(self):
        assert ConfigurationSpec.model_validate({}).resources == []


class TestExecutionPlan:
    def _plan(self) -> ExecutionPlan:
        vpc = InstanceAddress(resource=_addr("aws_vpc.main"))
        subnet = InstanceAddress(resource=_addr("aws_subnet.a"), key=0)
        return ExecutionPlan(
            instances=[
                ResourceInstance(address=vpc),
                ResourceInstance(address=subnet),
            ],
            stages=[[vpc], [subnet]],
        )

    def test_order_and_destroy_order(self):
        plan = self._plan()
        assert [str(a) for a in plan.order] == ["aws_vpc.main", "aws_subnet.a[0]"]
        assert [str(a) for a in plan.destroy_order] == [
            "aws_subnet.a[0]",
            "aws_vpc.main",
        ]

    def test_to_dict(self):
        data = self._plan().to_dict()
        assert data["status"] == "planned"
        assert data["order"] == ["aws_vpc.main", "aws_subnet.a[0]"]
        assert data["stages"] == [["aws_vpc.main"], ["aws_subnet.a[0]"]]

    def test_summary(self):
        summary = self._plan().summary()
        assert "Instances: 2" in summary
        assert "2. aws_subnet.a[0]" in summary
