"""DI container: services given as classes are built once, their __init__ dependencies resolved by annotation."""
from __future__ import annotations

import inspect
import sys
from typing import Any, Callable, TypeVar

T = TypeVar("T")

Key = type[Any] | str


def _annotation_target(ann: Any, cls: type[Any]) -> Any:
    """String annotation (from __future__ annotations) -> class from the defining module."""
    if not isinstance(ann, str):
        return ann
    mod = sys.modules.get(cls.__module__)
    return getattr(mod, ann, ann) if mod is not None else ann


class Container:
    """Registry of singletons and factories keyed by type or name."""

    def __init__(self) -> None:
        self._factories: dict[Key, Callable[[], Any]] = {}
        self._instances: dict[Key, Any] = {}

    def register_instance(self, key: Key, instance: Any) -> None:
        self._instances[key] = instance

    def register_class(self, cls: type[T]) -> None:
        """On first resolve an instance of cls is created with dependencies from the container."""
        self._factories[cls] = lambda: self.build(cls)

    def __contains__(self, key: Key) -> bool:
        return key in self._instances or key in self._factories

    def resolve(self, key: Key) -> Any:
        if key in self._instances:
            return self._instances[key]
        if key not in self._factories:
            raise KeyError(f"No registration for {key}")
        instance = self._factories[key]()
        self._instances[key] = instance
        return instance

    def build(self, cls: type[T]) -> T:
        """Instantiate cls; annotated __init__ parameters without defaults are resolved."""
        kwargs: dict[str, Any] = {}
        for name, param in inspect.signature(cls).parameters.items():
            if param.annotation is inspect.Parameter.empty:
                continue
            target = _annotation_target(param.annotation, cls)
            if target in self:
                kwargs[name] = self.resolve(target)
            elif param.default is inspect.Parameter.empty:
                raise KeyError(f"No registration for {target} (needed by {cls.__name__}.{name})")
        return cls(**kwargs)
