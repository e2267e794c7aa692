"""End-to-end schema generation scenarios."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, NamedTuple

import pytest
from class_schema_generator.configuration.loader import ConfigurationError, load_configuration
from class_schema_generator.configuration.runtime_settings import (
    Configuration,
    GenerationSettings,
    IntrospectionSettings,
)
from class_schema_generator.metadata_processing.attributes import Attributes, schema_attributes
from class_schema_generator.metadata_processing.metadata_processor import (
    AttributesMetadataProcessor,
    MemberMetadata,
    MetadataError,
)
from class_schema_generator.schema_generation.reference_tracking import (
    ManagedReference,
    ReferenceTracker,
)
from class_schema_generator.schema_generation.schema_generator import (
    SchemaGenerationError,
    SchemaGenerator,
    generate_schema,
    render_schema,
    resolve_dynamic_member_hook,
)
from class_schema_generator.type_introspection.class_introspector import (
    ClassIntrospector,
    IntrospectionError,
)
from class_schema_generator.type_introspection.type_members import (
    AccessorMember,
    DataMember,
)
from class_schema_generator.type_introspection.type_shapes import (
    TypeClassification,
    TypeClassifier,
)


@dataclass
class Node:
    id: str
    children: list[Node]


@dataclass
class Point:
    v: float


@dataclass
class Pair:
    a: Point
    b: Point


@dataclass
class Unordered:
    zulu: int
    alpha: int
    mike: int


class Marker:
    pass


@dataclass
class Holder:
    marker: Marker
    label: str


@dataclass
class Department:
    name: str
    manager: Employee | None


@dataclass
class Employee:
    name: str
    department: Department


@dataclass
class Company:
    board: Board


@dataclass
class Board:
    chair: Chair


@dataclass
class Chair:
    board: Board


@schema_attributes(id="#address", title="Postal address")
@dataclass
class Address:
    street: Annotated[str, Attributes(required=True, min_length=1)]
    previous: Address | None


@dataclass
class Customer:
    address: Address
    nickname: Annotated[str, Attributes(ignore=True)]


@schema_attributes(additional_properties=False)
@dataclass
class Closed:
    count: Annotated[int, Attributes(minimum=0, required=True)]


class Ledger:
    balance: float

    def getBalance(self) -> float:
        return self.balance


class Gauge:
    level: float


@schema_attributes(default=[])
class Tagged:
    pass


@dataclass
class TwoTagged:
    x: Tagged
    y: Tagged


class Span(NamedTuple):
    start: int
    end: int


@dataclass
class Booking:
    span: Span


def _generator(**options: Any) -> SchemaGenerator:
    return SchemaGenerator(
        introspector=ClassIntrospector(public_fields_as_properties=True, **options)
    )


def _fields_configuration() -> Configuration:
    return Configuration(
        path=None,
        generation=GenerationSettings(),
        introspection=IntrospectionSettings(public_fields_as_properties=True),
    )


def test_self_referencing_array_items_point_at_root() -> None:
    schema = _generator().generate(Node)

    assert schema == {
        "$schema": "http://json-schema.org/draft-04/schema#",
        "type": "object",
        "properties": {
            "children": {"type": "array", "items": {"$ref": "#"}},
            "id": {"type": "string"},
        },
    }


def test_sibling_properties_of_same_type_are_inlined_independently() -> None:
    schema = _generator().generate(Pair)
    point_schema = {"type": "object", "properties": {"v": {"type": "number"}}}

    assert schema["properties"]["a"] == point_schema
    assert schema["properties"]["b"] == point_schema
    assert schema["properties"]["a"] is not schema["properties"]["b"]


def test_generation_is_deterministic_and_sorted_by_name() -> None:
    generator = _generator()

    first = render_schema(generator.generate(Unordered))
    second = render_schema(generator.generate(Unordered))

    assert first == second
    assert list(generator.generate(Unordered)["properties"]) == ["alpha", "mike", "zulu"]


def test_empty_composite_properties_are_elided() -> None:
    schema = _generator().generate(Holder)

    assert schema["properties"] == {"label": {"type": "string"}}


def test_mutual_recursion_references_the_active_ancestor() -> None:
    department = _generator().generate(Department)
    employee = _generator().generate(Employee)

    assert department["properties"]["manager"] == {
        "type": ["object", "null"],
        "properties": {
            "department": {"$ref": "#"},
            "name": {"type": "string"},
        },
    }
    assert employee["properties"]["department"]["properties"]["manager"] == {"$ref": "#"}


def test_nested_cycle_references_the_nested_identifier() -> None:
    schema = _generator().generate(Company)

    chair = schema["properties"]["board"]["properties"]["chair"]
    assert chair["properties"]["board"] == {"$ref": "#/properties/board"}


def test_declared_anchor_is_used_for_references() -> None:
    schema = _generator().generate(Customer)

    assert schema["properties"] == {
        "address": {
            "type": "object",
            "id": "#address",
            "title": "Postal address",
            "properties": {
                "previous": {"$ref": "#address"},
                "street": {"type": "string", "minLength": 1},
            },
            "required": ["street"],
        }
    }


def test_closed_type_and_required_members() -> None:
    schema = SchemaGenerator(
        introspector=ClassIntrospector(public_fields_as_properties=True), schema_uri=None
    ).generate(Closed)

    assert schema == {
        "type": "object",
        "additionalProperties": False,
        "properties": {"count": {"type": "integer", "minimum": 0}},
        "required": ["count"],
    }


def test_shared_tracker_suppresses_expansion_of_held_types() -> None:
    tracker = ReferenceTracker()
    tracker.acquire(ManagedReference(Point, "#/definitions/Point"))

    schema = _generator().generate(Pair, tracker)

    assert schema["properties"] == {
        "a": {"$ref": "#/definitions/Point"},
        "b": {"$ref": "#/definitions/Point"},
    }
    assert len(tracker) == 1


def test_hook_failure_aborts_generation_without_leaking_references() -> None:
    def hook(type_: type) -> list[AccessorMember]:
        if type_ is Point:
            raise RuntimeError("plugin unavailable")
        return []

    tracker = ReferenceTracker()
    tracker.acquire(ManagedReference(Marker, "#/definitions/Marker"))

    with pytest.raises(SchemaGenerationError, match="Pair") as excinfo:
        _generator(dynamic_member_hook=hook).generate(Pair, tracker)

    assert isinstance(excinfo.value.__cause__, IntrospectionError)
    assert len(tracker) == 1
    assert ManagedReference(Marker) in tracker


def test_dynamic_accessors_are_merged_into_discovery() -> None:
    def hook(type_: type) -> list[AccessorMember]:
        return [AccessorMember(name="getLevel", owner=type_)] if type_ is Gauge else []

    plain = SchemaGenerator().generate(Gauge)
    extended = SchemaGenerator(
        introspector=ClassIntrospector(dynamic_member_hook=hook)
    ).generate(Gauge)

    assert "properties" not in plain
    assert extended["properties"] == {"level": {"type": "number"}}


def test_metadata_failure_aborts_generation() -> None:
    class _Exploding(AttributesMetadataProcessor):
        def process_member(
            self,
            accessor: AccessorMember,
            member: DataMember | None,
            node: MutableMapping[str, Any],
        ) -> MemberMetadata:
            raise ValueError("bad attribute")

    generator = SchemaGenerator(
        introspector=ClassIntrospector(public_fields_as_properties=True),
        metadata=_Exploding(),
    )

    with pytest.raises(SchemaGenerationError) as excinfo:
        generator.generate(Pair)

    assert isinstance(excinfo.value.__cause__, MetadataError)


def test_non_composite_root_is_rejected() -> None:
    with pytest.raises(SchemaGenerationError, match="not a composite"):
        _generator().generate(int)


def test_generate_schema_uses_configuration(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "generation:\n  schema_uri: ''\n  optional_as_nullable: false\n"
        "introspection:\n  public_fields_as_properties: true\n",
        encoding="utf-8",
    )

    schema = generate_schema(Department, load_configuration(config_path))

    assert "$schema" not in schema
    assert schema["properties"]["manager"]["type"] == "object"


def test_generate_schema_defaults_to_getter_discovery() -> None:
    assert generate_schema(Ledger)["properties"] == {"balance": {"type": "number"}}
    assert "properties" not in generate_schema(Node)
    assert "properties" in generate_schema(Node, _fields_configuration())


def test_resolve_dynamic_member_hook() -> None:
    assert resolve_dynamic_member_hook(None) is None
    assert resolve_dynamic_member_hook("json:loads").__name__ == "loads"

    with pytest.raises(ConfigurationError, match="Cannot import"):
        resolve_dynamic_member_hook("not_a_real_module_for_hooks:hook")
    with pytest.raises(ConfigurationError, match="not callable"):
        resolve_dynamic_member_hook("json:__name__")


def test_cycle_substitution_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="class_schema_generator.generation"):
        _generator().generate(Node)

    assert any("Cycle on Node" in record.getMessage() for record in caplog.records)


def test_function_local_self_reference_terminates() -> None:
    @dataclass
    class TreeNode:
        id: str
        children: list[TreeNode]

    schema = _generator().generate(TreeNode)

    assert schema["properties"]["children"] == {"type": "array", "items": {"$ref": "#"}}


def test_attribute_defaults_are_copied_into_each_node() -> None:
    generator = _generator()
    first = generator.generate(TwoTagged)

    x_default = first["properties"]["x"]["default"]
    y_default = first["properties"]["y"]["default"]
    assert x_default == y_default == []
    assert x_default is not y_default

    x_default.append("mutated")
    second = generator.generate(TwoTagged)

    assert second["properties"]["x"]["default"] == []


def test_classifier_failure_is_reported_as_generation_error() -> None:
    class _FailingClassifier(TypeClassifier):
        def classify(self, annotation: Any) -> TypeClassification:
            if annotation is float:
                raise KeyError("no rule for float")
            return super().classify(annotation)

    tracker = ReferenceTracker()
    generator = SchemaGenerator(
        introspector=ClassIntrospector(public_fields_as_properties=True),
        classifier=_FailingClassifier(),
    )

    with pytest.raises(SchemaGenerationError, match="Pair") as excinfo:
        generator.generate(Pair, tracker)

    assert isinstance(excinfo.value.__cause__, KeyError)
    assert len(tracker) == 0


def test_introspector_failure_is_reported_as_generation_error() -> None:
    class _FailingIntrospector(ClassIntrospector):
        def declared_members(self, type_: type) -> tuple[DataMember, ...]:
            raise LookupError("registry offline")

    with pytest.raises(SchemaGenerationError, match="registry offline") as excinfo:
        SchemaGenerator(introspector=_FailingIntrospector()).generate(Pair)

    assert isinstance(excinfo.value.__cause__, LookupError)


def test_named_tuples_are_generated_as_objects() -> None:
    assert SchemaGenerator().generate(Span)["properties"] == {
        "end": {"type": "integer"},
        "start": {"type": "integer"},
    }
    assert _generator().generate(Booking)["properties"]["span"] == {
        "type": "object",
        "properties": {"end": {"type": "integer"}, "start": {"type": "integer"}},
    }
