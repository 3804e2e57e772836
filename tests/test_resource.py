"""
Tests for resource declarations and generated values.
"""

import pytest

from livestack.config.serverless import FunctionConfig
from livestack.config.table import PartitionKey, TableConfig
from livestack.core.errors import GraphConstructionError, UnresolvedValueError
from livestack.core.resource import (
    GeneratedValue,
    ResourceDeclaration,
    ResourceKind,
    ResourceState,
    find_references,
    resolve_value,
)


def _table(logical_id: str = "Table") -> ResourceDeclaration:
    config = TableConfig(partition_key=PartitionKey(name="arn"))
    return ResourceDeclaration(logical_id, ResourceKind.TABLE, config, ("table_name", "table_arn"))


class TestGeneratedValue:
    """Tests for GeneratedValue placeholders."""

    def test_equality_and_hash(self):
        """References to the same attribute are interchangeable."""
        a = GeneratedValue("Table", "table_name")
        b = GeneratedValue("Table", "table_name")

        assert a == b
        assert hash(a) == hash(b)
        assert a != GeneratedValue("Table", "table_arn")

    def test_str(self):
        assert str(GeneratedValue("Table", "table_name")) == "${Table.table_name}"


class TestReferences:
    """Tests for finding and resolving references in configuration."""

    def test_find_references_in_environment(self):
        """References nested in dicts are found."""
        name = GeneratedValue("Table", "table_name")
        config = FunctionConfig(image_path="app", environment={"REGION": "", "TABLE_NAME": name})

        assert list(find_references(config)) == [name]

    def test_no_references(self):
        config = TableConfig(partition_key=PartitionKey(name="arn"))

        assert list(find_references(config)) == []

    def test_resolve_value(self):
        """Placeholders are replaced; literals are kept."""
        name = GeneratedValue("Table", "table_name")
        data = {"environment": {"REGION": "ap-northeast-1", "TABLE_NAME": name}, "tags": [name]}

        resolved = resolve_value(data, lambda ref: f"resolved-{ref.attribute}")

        assert resolved == {
            "environment": {"REGION": "ap-northeast-1", "TABLE_NAME": "resolved-table_name"},
            "tags": ["resolved-table_name"],
        }


class TestResourceDeclaration:
    """Tests for the declaration lifecycle."""

    def test_starts_declared(self):
        assert _table().state is ResourceState.DECLARED

    def test_ref(self):
        declaration = _table()

        assert declaration.ref("table_name") == GeneratedValue("Table", "table_name")

    def test_ref_unknown_attribute(self):
        """Only generated attributes can be referenced."""
        with pytest.raises(GraphConstructionError, match="does not generate 'url'"):
            _table().ref("url")

    def test_dependencies_from_references(self):
        """Dependencies are derived from referenced owners, then explicit ones."""
        config = FunctionConfig(
            image_path="app",
            environment={
                "A": GeneratedValue("Table", "table_name"),
                "B": GeneratedValue("Table", "table_arn"),
            },
        )
        declaration = ResourceDeclaration(
            "Function", ResourceKind.FUNCTION, config, depends_on=("Queue",)
        )

        assert declaration.dependencies == ["Table", "Queue"]

    def test_value_before_realization(self):
        """Reading a generated value early is an error."""
        with pytest.raises(UnresolvedValueError):
            _table().value("table_name")

    def test_lifecycle(self):
        """Declared -> Ordered -> Realized."""
        declaration = _table()
        declaration.mark_ordered()
        assert declaration.state is ResourceState.ORDERED

        declaration.mark_realized({"table_name": "t-1", "table_arn": "arn:t-1"})

        assert declaration.is_realized
        assert declaration.value("table_name") == "t-1"

    def test_cannot_realize_unordered(self):
        """Realization requires a position in the order."""
        with pytest.raises(ValueError, match="must be ordered"):
            _table().mark_realized({"table_name": "t", "table_arn": "a"})

    def test_realize_requires_all_values(self):
        """Every generated attribute must be reported."""
        declaration = _table()
        declaration.mark_ordered()

        with pytest.raises(ValueError, match="table_arn"):
            declaration.mark_realized({"table_name": "t-1"})
        assert declaration.state is ResourceState.ORDERED
