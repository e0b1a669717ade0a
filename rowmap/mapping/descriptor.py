"""Record descriptors.

A RecordDescriptor is the field table of a record type: each settable
field's name, its resolved TypeSpec and a setter. Descriptors are built
from dataclass fields, Pydantic ``model_fields`` or plain class
annotations the first time a type is mapped, then cached process-wide.
Types can also be registered explicitly.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, get_origin, get_type_hints

from rowmap.conversion.types import TypeSpec, resolve_type
from rowmap.core.exceptions import ConfigurationError

Setter = Callable[[Any, Any], None]


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    try:
        from pydantic import BaseModel

        return issubclass(cls, BaseModel)
    except ImportError:
        return False


def _frozen_setter(name: str) -> Setter:
    def setter(instance: Any, value: Any) -> None:
        object.__setattr__(instance, name, value)

    return setter


def _attribute_setter(name: str) -> Setter:
    def setter(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    return setter


@dataclass(frozen=True)
class FieldDescriptor:
    """A settable field of a record type."""

    name: str
    spec: TypeSpec
    setter: Setter

    def assign(self, instance: Any, value: Any) -> None:
        self.setter(instance, value)


@dataclass(frozen=True)
class RecordDescriptor:
    """Field table and factory for a record type."""

    record_type: type
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[[], Any]

    _registry: ClassVar[dict[type, RecordDescriptor]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def of(cls, record_type: type) -> RecordDescriptor:
        """Return the cached descriptor for record_type, building it once."""
        if record_type is None:
            raise ConfigurationError("Record type must not be None")
        descriptor = cls._registry.get(record_type)
        if descriptor is None:
            with cls._lock:
                descriptor = cls._registry.get(record_type)
                if descriptor is None:
                    descriptor = cls._build(record_type)
                    cls._registry[record_type] = descriptor
        return descriptor

    @classmethod
    def register(
        cls,
        record_type: type,
        fields: Mapping[str, Any] | None = None,
        *,
        factory: Callable[[], Any] | None = None,
    ) -> RecordDescriptor:
        """Install an explicit descriptor for record_type.

        Args:
            record_type: The class instances are created from.
            fields: Field name to target type. Defaults to the fields
                discovered from the class.
            factory: Zero-argument constructor. Defaults to record_type.
        """
        if record_type is None:
            raise ConfigurationError("Record type must not be None")
        if fields is None:
            discovered = cls._build(record_type)
            field_table = discovered.fields
        else:
            setter_for = _setter_factory(record_type)
            field_table = tuple(
                FieldDescriptor(name, resolve_type(target), setter_for(name))
                for name, target in fields.items()
            )
        descriptor = cls(record_type, field_table, factory or record_type)
        with cls._lock:
            cls._registry[record_type] = descriptor
        return descriptor

    @classmethod
    def forget(cls, record_type: type) -> None:
        """Drop a cached or registered descriptor."""
        with cls._lock:
            cls._registry.pop(record_type, None)

    @classmethod
    def _build(cls, record_type: type) -> RecordDescriptor:
        if not isinstance(record_type, type):
            raise ConfigurationError(f"{record_type!r} is not a class")
        if _is_pydantic_model(record_type):
            hints = _pydantic_hints(record_type)
        else:
            try:
                hints = get_type_hints(record_type, include_extras=True)
            except (NameError, TypeError) as e:
                raise ConfigurationError(
                    f"Cannot resolve field annotations of {record_type.__name__}: {e}"
                ) from e

        names = _field_names(record_type, hints)
        setter_for = _setter_factory(record_type)
        fields = tuple(
            FieldDescriptor(name, resolve_type(hints[name]), setter_for(name))
            for name in names
        )
        return cls(record_type, fields, record_type)

    def instantiate(self) -> Any:
        """Create a default instance via the zero-argument factory."""
        try:
            return self.factory()
        except Exception as e:
            raise ConfigurationError(
                f"Cannot instantiate {self.record_type.__name__} without arguments: {e}"
            ) from e


def _pydantic_hints(record_type: type) -> dict[str, Any]:
    """Field annotations of a Pydantic model, with Annotated metadata restored."""
    hints: dict[str, Any] = {}
    for name, info in record_type.model_fields.items():  # type: ignore[attr-defined]
        if info.annotation is None:
            raise ConfigurationError(
                f"Cannot resolve field annotations of {record_type.__name__}: "
                f"'{name}' has no type"
            )
        if info.metadata:
            hints[name] = Annotated[(info.annotation, *info.metadata)]
        else:
            hints[name] = info.annotation
    return hints


def _field_names(record_type: type, hints: dict[str, Any]) -> list[str]:
    """Names of the publicly settable, annotated fields of record_type."""
    if _is_pydantic_model(record_type):
        return [name for name in record_type.model_fields if name in hints]  # type: ignore[attr-defined]
    if dataclasses.is_dataclass(record_type):
        return [f.name for f in dataclasses.fields(record_type) if f.name in hints]
    return [
        name
        for name, hint in hints.items()
        if not name.startswith("_") and get_origin(hint) is not ClassVar and hint is not ClassVar
    ]


def _setter_factory(record_type: type) -> Callable[[str], Setter]:
    params = getattr(record_type, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return _frozen_setter
    if _is_pydantic_model(record_type) and record_type.model_config.get("frozen"):  # type: ignore[attr-defined]
        return _frozen_setter
    return _attribute_setter
