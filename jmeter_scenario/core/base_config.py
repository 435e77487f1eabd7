"""Option-merging framework shared by every scenario model entity.

Each entity is a dataclass deriving from BaseConfig. Construction from a
plain nested options mapping always runs in the same order:

1. ``init_options`` hook (inject defaults, wrap nested sub-structures)
2. ``set`` - direct overwrite of every non-list field
3. ``sets`` - typed construction of list fields declared in ``LIST_FIELDS``
"""

import itertools
import logging
from collections.abc import Mapping
from dataclasses import Field, field, fields
from typing import Any, ClassVar, Optional, Set, TypeVar

from jmeter_scenario.exceptions import ScenarioValidationException

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


class IdSequence:
    """Deterministic display-id generator (1, 2, 3, ...)."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)


class BuildContext:
    """State shared by all entities constructed during one model build.

    A new context is created for every top-level ``from_options`` call that
    does not receive one, so separate builds never share id sequences.
    """

    def __init__(self, ids: Optional[IdSequence] = None) -> None:
        self.ids = ids or IdSequence()

    def next_id(self) -> int:
        return self.ids.next_id()


def option_field(default: Any = None, alias: Optional[str] = None) -> Any:
    """Declare a scalar field, optionally readable under a camelCase alias."""
    return field(default=default, metadata={"alias": alias} if alias else {})


def list_field(alias: Optional[str] = None) -> Any:
    """Declare a list field populated by typed construction."""
    return field(default_factory=list, metadata={"alias": alias} if alias else {})


class BaseConfig:
    """Base class for all scenario model entities.

    Subclasses are dataclasses whose every field has a default, so ``cls()``
    yields an entity populated with default values. ``LIST_FIELDS`` declares
    the ``(field_name, child_type)`` pairs built from option lists.

    Example:
        >>> request = Request.from_options({"name": "Login", "method": "POST"})
        >>> request.method
        'POST'
    """

    LIST_FIELDS: ClassVar[tuple[tuple[str, type["BaseConfig"]], ...]] = ()

    @classmethod
    def from_options(
        cls: type[ConfigT],
        options: Any = None,
        context: Optional[BuildContext] = None,
    ) -> ConfigT:
        """Build an entity from a plain options mapping.

        Args:
            options: Mapping of field name (or alias) to value. None means
                all defaults. An instance of ``cls`` is returned unchanged.
            context: Build context shared with child entities

        Returns:
            Fully constructed entity

        Raises:
            ScenarioValidationException: If options is not a mapping or a
                list field option is not a list
        """
        if isinstance(options, cls):
            return options
        if options is None:
            options = {}
        elif not isinstance(options, Mapping):
            raise ScenarioValidationException(
                f"Invalid {cls.__name__} options: expected mapping, got {type(options).__name__}"
            )

        context = context or BuildContext()
        instance = cls()
        # Work on a copy so the caller's options are never mutated
        merged = instance.init_options(dict(options), context)
        instance.set(merged)
        instance.sets(merged, context)

        unknown = set(merged) - instance._option_names()
        if unknown:
            logger.debug("Ignoring unknown %s options: %s", cls.__name__, sorted(unknown))

        return instance

    def init_options(self, options: dict[str, Any], context: BuildContext) -> dict[str, Any]:
        """Pre-process incoming options before they are applied.

        Args:
            options: Private copy of the options mapping
            context: Current build context

        Returns:
            Options to apply
        """
        return options

    def set(self, options: Mapping[str, Any]) -> None:
        """Overwrite every non-list field with the value found in options."""
        for f in fields(self):
            key = self._option_key(f, options)
            if key is None:
                continue
            if isinstance(getattr(self, f.name), list):
                continue
            setattr(self, f.name, options[key])

    def sets(self, options: Mapping[str, Any], context: BuildContext) -> None:
        """Append typed children built from option lists to list fields."""
        declared = {f.name: f for f in fields(self)}
        for name, child_type in self.LIST_FIELDS:
            key = self._option_key(declared[name], options)
            if key is None or options[key] is None:
                continue
            raw_items = options[key]
            if not isinstance(raw_items, (list, tuple)):
                raise ScenarioValidationException(
                    f"Invalid '{key}' in {type(self).__name__}: expected list, "
                    f"got {type(raw_items).__name__}"
                )
            target = getattr(self, name)
            for raw in raw_items:
                target.append(child_type.from_options(raw, context))

    def is_valid(self) -> bool:
        """Whether this entity contributes to compiled output."""
        return True

    def get_option(self, options: Mapping[str, Any], name: str) -> Any:
        """Read an option by field name or alias (None when absent)."""
        f = next(f for f in fields(self) if f.name == name)
        key = self._option_key(f, options)
        return options[key] if key is not None else None

    def put_option(self, options: dict[str, Any], name: str, value: Any) -> None:
        """Store an option under its field name, dropping any alias copy."""
        f = next(f for f in fields(self) if f.name == name)
        alias = f.metadata.get("alias")
        if alias:
            options.pop(alias, None)
        options[name] = value

    def _option_names(self) -> Set[str]:
        names = set()
        for f in fields(self):
            names.add(f.name)
            if f.metadata.get("alias"):
                names.add(f.metadata["alias"])
        return names

    @staticmethod
    def _option_key(f: Field, options: Mapping[str, Any]) -> Optional[str]:
        if f.name in options:
            return f.name
        alias = f.metadata.get("alias")
        if alias and alias in options:
            return alias
        return None
