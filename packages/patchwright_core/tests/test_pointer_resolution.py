from __future__ import annotations

from pydantic import BaseModel, Field

from patchwright_core import (
    IndexedContainer,
    Location,
    MappingContainer,
    ModelContainer,
    PatchError,
    PatchErrorCode,
    parse_pointer,
    resolve,
)


class Address(BaseModel):
    city: str
    zip_codes: list[int] = Field(default_factory=list)


class Person(BaseModel):
    name: str
    address: Address
    tags: list[str] = Field(default_factory=list)
    scores: dict[str, int] = Field(default_factory=dict)


def _person() -> Person:
    return Person(
        name="Bob",
        address=Address(city="Oslo", zip_codes=[150, 151]),
        tags=["a", "b"],
        scores={"math": 3},
    )


def test_parse_pointer_unescapes_segments() -> None:
    assert parse_pointer("/a~1b/c~0d") == ["a/b", "c~d"]
    assert parse_pointer("/~01") == ["~1"]
    assert parse_pointer("/") == [""]


def test_parse_pointer_rejects_relative_and_bad_escapes() -> None:
    relative = parse_pointer("a/b")
    assert isinstance(relative, PatchError)
    assert relative.code == PatchErrorCode.MALFORMED_PATH

    bad_escape = parse_pointer("/a~2")
    assert isinstance(bad_escape, PatchError)
    assert bad_escape.code == PatchErrorCode.MALFORMED_PATH


def test_root_pointer_is_malformed() -> None:
    result = resolve("", {"a": 1})
    assert isinstance(result, PatchError)
    assert result.code == PatchErrorCode.MALFORMED_PATH


def test_resolve_stops_before_last_segment() -> None:
    doc = {"tags": ["a", "b"]}
    loc = resolve("/tags/1", doc)
    assert isinstance(loc, Location)
    assert loc.is_collection
    assert loc.key == 1
    assert loc.container.target is doc["tags"]


def test_resolve_keeps_append_marker() -> None:
    loc = resolve("/tags/-", {"tags": []})
    assert isinstance(loc, Location)
    assert loc.key == "-"


def test_resolve_rejects_non_index_collection_key() -> None:
    for path in ("/tags/01", "/tags/x", "/tags/-1"):
        result = resolve(path, {"tags": ["a"]})
        assert isinstance(result, PatchError), path
        assert result.code == PatchErrorCode.MALFORMED_PATH


def test_resolve_reports_missing_intermediate_segments() -> None:
    cases = [
        ("/missing/x", {}),
        ("/a/5/x", {"a": [1]}),
        ("/a/-/x", {"a": [{"x": 1}]}),
        ("/a/b", {"a": None}),
        ("/a/b", {"a": 3}),
        ("/a/b/c", {"a": {"b": "text"}}),
    ]
    for path, doc in cases:
        result = resolve(path, doc)
        assert isinstance(result, PatchError), path
        assert result.code == PatchErrorCode.PATH_NOT_FOUND, path


def test_resolve_walks_models_and_carries_declared_types() -> None:
    person = _person()

    zip_loc = resolve("/address/zip_codes/0", person)
    assert isinstance(zip_loc, Location)
    assert isinstance(zip_loc.container, IndexedContainer)
    assert zip_loc.container.item_type is int

    score_loc = resolve("/scores/physics", person)
    assert isinstance(score_loc, Location)
    assert isinstance(score_loc.container, MappingContainer)
    assert score_loc.container.slot_type("physics") is int

    city_loc = resolve("/address/city", person)
    assert isinstance(city_loc, Location)
    assert isinstance(city_loc.container, ModelContainer)
    assert not city_loc.is_collection
    assert city_loc.key == "city"


def test_resolve_unknown_model_member_mid_path() -> None:
    result = resolve("/nickname/first", _person())
    assert isinstance(result, PatchError)
    assert result.code == PatchErrorCode.PATH_NOT_FOUND


def test_location_contains_checks_whole_segments() -> None:
    doc = {"a": {"b": {"c": 1}, "bc": 2}}
    parent = resolve("/a/b", doc)
    child = resolve("/a/b/c", doc)
    sibling = resolve("/a/bc", doc)
    assert isinstance(parent, Location)
    assert isinstance(child, Location)
    assert isinstance(sibling, Location)
    assert parent.contains(child)
    assert parent.contains(parent)
    assert not parent.contains(sibling)
    assert not child.contains(parent)


def test_location_pointer_round_trips_escapes() -> None:
    loc = resolve("/a~1b/c~0d", {"a/b": {"c~d": 1}})
    assert isinstance(loc, Location)
    assert loc.pointer == "/a~1b/c~0d"
