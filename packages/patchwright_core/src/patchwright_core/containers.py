"""
Container adapters over a live object graph.

The resolver and executor never inspect target objects directly; they work
through ``PatchableContainer``. Two variants exist:

* ``KeyedContainer``: named members (pydantic models, dataclasses, mappings).
* ``IndexedContainer``: integer-indexed mutable sequences.

Each adapter also knows the declared type of its slots so written values can
be coerced, and so nested containers learn their element types while the
resolver descends.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, MutableMapping, MutableSequence, Sequence
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

from pydantic import BaseModel

NO_DEFAULT: Any = object()

ContainerFactory = Callable[[Any, Any], "PatchableContainer"]

_REGISTRY: list[tuple[type, ContainerFactory]] = []

_SEQUENCE_ORIGINS = (list, MutableSequence, Sequence)
_MAPPING_ORIGINS = (dict, MutableMapping, Mapping)


class PatchableContainer(ABC):
    is_collection: ClassVar[bool]

    def __init__(self, target: Any) -> None:
        self.target = target

    @property
    def type_name(self) -> str:
        return type(self.target).__name__

    @abstractmethod
    def slot_type(self, key: Any) -> Any:
        """Declared type of the value stored under ``key``."""


class KeyedContainer(PatchableContainer):
    is_collection = False
    # Open containers accept new members and delete them on remove.
    open_members: ClassVar[bool] = False

    @abstractmethod
    def has_member(self, name: str) -> bool: ...

    @abstractmethod
    def get_member(self, name: str) -> Any: ...

    @abstractmethod
    def set_member(self, name: str, value: Any) -> None: ...

    def member_type(self, name: str) -> Any:
        return Any

    def is_settable(self, name: str) -> bool:
        return True

    def member_default(self, name: str) -> Any:
        return NO_DEFAULT

    def remove_member(self, name: str) -> None:
        raise TypeError(f"{self.type_name} members cannot be deleted")

    def slot_type(self, key: Any) -> Any:
        return self.member_type(key)


class IndexedContainer(PatchableContainer):
    is_collection = True

    def __init__(self, target: MutableSequence[Any], item_type: Any = Any) -> None:
        super().__init__(target)
        self.item_type = item_type

    @property
    def length(self) -> int:
        return len(self.target)

    def get_item(self, index: int) -> Any:
        return self.target[index]

    def set_item(self, index: int, value: Any) -> None:
        self.target[index] = value

    def insert_item(self, index: int, value: Any) -> None:
        self.target.insert(index, value)

    def pop_item(self, index: int) -> Any:
        return self.target.pop(index)

    def slot_type(self, key: Any) -> Any:
        return self.item_type


class ModelContainer(KeyedContainer):
    """Closed member set: the declared fields of a pydantic model."""

    def __init__(self, target: BaseModel) -> None:
        super().__init__(target)
        self._fields = type(target).model_fields
        self._aliases = {
            field.alias: name for name, field in self._fields.items() if field.alias
        }

    def _field_name(self, name: str) -> str | None:
        if name in self._fields:
            return name
        return self._aliases.get(name)

    def has_member(self, name: str) -> bool:
        return self._field_name(name) is not None

    def get_member(self, name: str) -> Any:
        return getattr(self.target, self._field_name(name) or name)

    def set_member(self, name: str, value: Any) -> None:
        setattr(self.target, self._field_name(name) or name, value)

    def member_type(self, name: str) -> Any:
        field_name = self._field_name(name)
        if field_name is None:
            return Any
        field = self._fields[field_name]
        annotation = field.annotation if field.annotation is not None else Any
        if field.metadata:
            return Annotated[(annotation, *field.metadata)]
        return annotation

    def is_settable(self, name: str) -> bool:
        field_name = self._field_name(name)
        if field_name is None or self.target.model_config.get("frozen", False):
            return False
        return not self._fields[field_name].frozen

    def member_default(self, name: str) -> Any:
        field = self._fields[self._field_name(name) or name]
        if field.is_required():
            return NO_DEFAULT
        # factories may take the other fields' values, as at validation time
        current = {field_name: getattr(self.target, field_name) for field_name in self._fields}
        return field.get_default(call_default_factory=True, validated_data=current)


class DataclassContainer(KeyedContainer):
    """Closed member set: the fields of a dataclass instance."""

    def __init__(self, target: Any) -> None:
        super().__init__(target)
        self._fields = {field.name: field for field in dataclasses.fields(target)}
        try:
            self._hints = typing.get_type_hints(type(target), include_extras=True)
        except (NameError, TypeError):
            self._hints = {}

    def has_member(self, name: str) -> bool:
        return name in self._fields

    def get_member(self, name: str) -> Any:
        return getattr(self.target, name)

    def set_member(self, name: str, value: Any) -> None:
        setattr(self.target, name, value)

    def member_type(self, name: str) -> Any:
        if name in self._hints:
            return self._hints[name]
        declared = self._fields[name].type if name in self._fields else Any
        return Any if isinstance(declared, str) else declared

    def is_settable(self, name: str) -> bool:
        return name in self._fields and not type(self.target).__dataclass_params__.frozen

    def member_default(self, name: str) -> Any:
        field = self._fields[name]
        if field.default is not dataclasses.MISSING:
            return field.default
        if field.default_factory is not dataclasses.MISSING:
            return field.default_factory()
        return NO_DEFAULT


class MappingContainer(KeyedContainer):
    """Open member set: a decoded document object or any mutable mapping."""

    open_members = True

    def __init__(self, target: MutableMapping[str, Any], value_type: Any = Any) -> None:
        super().__init__(target)
        self.value_type = value_type

    def has_member(self, name: str) -> bool:
        return name in self.target

    def get_member(self, name: str) -> Any:
        return self.target[name]

    def set_member(self, name: str, value: Any) -> None:
        self.target[name] = value

    def remove_member(self, name: str) -> None:
        del self.target[name]

    def member_type(self, name: str) -> Any:
        return self.value_type


def unwrap_type(declared: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` wrappers from a declared type."""
    origin = get_origin(declared)
    if origin is Annotated:
        return unwrap_type(get_args(declared)[0])
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(declared) if arg is not type(None)]
        if len(members) == 1:
            return unwrap_type(members[0])
        return Any
    return declared


def _item_type(declared: Any) -> Any:
    base = unwrap_type(declared)
    if get_origin(base) in _SEQUENCE_ORIGINS:
        args = get_args(base)
        return args[0] if args else Any
    return Any


def _value_type(declared: Any) -> Any:
    base = unwrap_type(declared)
    if get_origin(base) in _MAPPING_ORIGINS:
        args = get_args(base)
        return args[1] if len(args) == 2 else Any
    return Any


def register_container(cls: type, factory: ContainerFactory) -> None:
    """Adapt instances of ``cls`` with ``factory(value, declared_type)``.

    Registered adapters win over the built-in ones; the most recent
    registration is consulted first.
    """
    _REGISTRY.append((cls, factory))


def unregister_container(cls: type) -> None:
    _REGISTRY[:] = [(entry, factory) for entry, factory in _REGISTRY if entry is not cls]


def as_container(value: Any, declared_type: Any = Any) -> PatchableContainer | None:
    if value is None:
        return None
    for cls, factory in reversed(_REGISTRY):
        if isinstance(value, cls):
            return factory(value, declared_type)
    if isinstance(value, BaseModel):
        return ModelContainer(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return DataclassContainer(value)
    if isinstance(value, MutableMapping):
        return MappingContainer(value, _value_type(declared_type))
    if isinstance(value, MutableSequence) and not isinstance(value, (str, bytes, bytearray)):
        return IndexedContainer(value, _item_type(declared_type))
    return None
