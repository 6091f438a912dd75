"""Strainer: the per-render filter registry and dispatcher.

Filters come from three places, merged into one Strainer per render:

1. provider types registered with ``register_filter_provider`` (classes or
   modules whose public functions are filters);
2. ad hoc functions registered with ``register_filter_function``;
3. functions added to a single Strainer with ``Strainer.add_function``.

Several filters may share a name. A call is resolved by name, positional
argument count and named-argument set (see ``Strainer.invoke``).

The global tables are not synchronized; register before rendering starts or
hold ``REGISTRY_LOCK`` around mutation.
"""
from __future__ import annotations

import inspect
import logging
from decimal import Decimal
from types import ModuleType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from ..exceptions import ArgumentConversionError, MissingDefaultValueError, UnknownFilterError
from ..naming import get_naming_convention
from .context import Context
from .filter_info import FilterInfo, bind_target
from .operators import convert_scalar, is_number

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (bool, int, float, Decimal, str)

# qualified provider name -> provider (class or module), in registration order
_filter_providers: Dict[str, Any] = {}
# canonical name -> (target, function)
_filter_functions: Dict[str, Tuple[Any, Callable[..., Any]]] = {}
# provider -> descriptors of its public functions
_reflection_cache: Dict[Any, Tuple[FilterInfo, ...]] = {}


def _provider_key(provider: Any) -> str:
    if isinstance(provider, ModuleType):
        return provider.__name__
    return f"{provider.__module__}.{provider.__qualname__}"


def _provider_functions(provider: Any) -> Iterator[Tuple[str, Callable[..., Any]]]:
    if isinstance(provider, ModuleType):
        for name, func in inspect.getmembers(provider, inspect.isfunction):
            if not name.startswith("_") and func.__module__ == provider.__name__:
                yield name, func
        return

    seen = set()
    for klass in provider.__mro__:
        if klass is object:
            continue
        for name, raw in vars(klass).items():
            if name.startswith("_") or name in seen:
                continue
            seen.add(name)
            if isinstance(raw, staticmethod):
                yield name, raw.__func__
            elif isinstance(raw, classmethod):
                yield name, getattr(provider, name)
            elif inspect.isfunction(raw):
                yield name, raw


def provider_filters(provider: Any) -> Tuple[FilterInfo, ...]:
    """Descriptors for every public function of a provider (cached)."""
    cached = _reflection_cache.get(provider)
    if cached is None:
        cached = tuple(FilterInfo(func, name) for name, func in _provider_functions(provider))
        _reflection_cache[provider] = cached
    return cached


def register_filter_provider(provider: Any) -> None:
    """Register a class or module whose public functions are filters."""
    if not isinstance(provider, (type, ModuleType)):
        raise TypeError(
            f"Filter provider must be a class or module, got {type(provider).__name__}"
        )
    _filter_providers[_provider_key(provider)] = provider
    logger.debug("Registered filter provider %s", _provider_key(provider))


def register_filter_function(name: str, target: Any, function: Callable[..., Any]) -> None:
    """Register a single function as a global filter.

    Args:
        name: Filter name; stored in canonical form under the active convention.
        target: Object to bind ``function`` to, or None for a plain function.
        function: The filter implementation.
    """
    key = get_naming_convention().get_member_name(name)
    _filter_functions[key] = (target, function)
    logger.debug("Registered filter function %s", key)


def unregister_filter_provider(provider: Any) -> bool:
    """Remove a previously registered provider.

    Args:
        provider: The class or module passed to ``register_filter_provider``.

    Returns:
        True if the provider was registered.
    """
    return _filter_providers.pop(_provider_key(provider), None) is not None


def unregister_filter_function(name: str) -> bool:
    """Remove a global filter function.

    Args:
        name: Filter name, canonicalized under the active naming convention.

    Returns:
        True if a function was registered under ``name``.
    """
    key = get_naming_convention().get_member_name(name)
    return _filter_functions.pop(key, None) is not None


def registered_filters() -> Tuple[Dict[str, Any], Dict[str, Tuple[Any, Callable[..., Any]]]]:
    """Snapshot of the global provider and function tables."""
    return dict(_filter_providers), dict(_filter_functions)


def restore_filters(
    snapshot: Tuple[Mapping[str, Any], Mapping[str, Tuple[Any, Callable[..., Any]]]],
) -> None:
    """Replace both global filter tables with a ``registered_filters()`` snapshot."""
    providers, functions = snapshot
    _filter_providers.clear()
    _filter_providers.update(providers)
    _filter_functions.clear()
    _filter_functions.update(functions)


class Strainer:
    """Filters available to one render, grouped by lookup key."""

    def __init__(self, context: Context) -> None:
        self._context = context
        self._methods: Dict[str, List[FilterInfo]] = {}

    @classmethod
    def create(cls, context: Context) -> "Strainer":
        strainer = cls(context)
        for provider in _filter_providers.values():
            strainer.extend(provider)
        for name, (target, function) in _filter_functions.items():
            strainer.add_function(name, function, target=target)
        return strainer

    @property
    def context(self) -> Context:
        return self._context

    @property
    def methods(self) -> List[FilterInfo]:
        return [info for infos in self._methods.values() for info in infos]

    def _key(self, name: str) -> str:
        convention = self._context.naming_convention
        return convention.lookup_key(convention.get_member_name(name))

    def extend(self, provider: Any) -> None:
        """Add a provider's filters, replacing same-name same-signature overloads."""
        convention = self._context.naming_convention
        infos = provider_filters(provider)
        for info in infos:
            existing = self._methods.get(self._key(info.name))
            if existing:
                existing[:] = [m for m in existing if not m.same_signature(info, convention)]
        for info in infos:
            self._add(info)

    def add_function(self, name: str, function: Callable[..., Any], *, target: Any = None) -> None:
        self._add(FilterInfo(bind_target(function, target), name))

    def _add(self, info: FilterInfo) -> None:
        self._methods.setdefault(self._key(info.name), []).append(info)

    def respond_to(self, name: str) -> bool:
        """Return True if at least one filter is registered under ``name``."""
        return bool(self._methods.get(self._key(name)))

    def __contains__(self, name: str) -> bool:
        return self.respond_to(name)

    def resolve(self, name: str, ordered_count: int, named_keys: Any = ()) -> FilterInfo:
        """Pick the overload for a call.

        The first filter whose ordered count and named set match exactly wins;
        otherwise the filter with the most parameters, on the assumption that
        defaults cover the rest.
        """
        candidates = self._methods.get(self._key(name))
        if not candidates:
            raise UnknownFilterError(name)
        convention = self._context.naming_convention
        for info in candidates:
            if info.is_count_and_named_match(ordered_count, named_keys, convention):
                return info
        fallback = max(candidates, key=lambda info: info.parameter_count)
        logger.debug(
            "No exact overload of %s for %d ordered and %s named arguments; using %r",
            name,
            ordered_count,
            sorted(named_keys),
            fallback,
        )
        return fallback

    def invoke(
        self,
        name: str,
        args: Optional[List[Any]] = None,
        named_args: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Call filter ``name``; exceptions raised by the filter propagate."""
        convention = self._context.naming_convention
        arguments = list(args or [])
        supplied = {
            convention.lookup_key(convention.get_member_name(key)): value
            for key, value in (named_args or {}).items()
        }
        info = self.resolve(name, len(arguments), frozenset(supplied))
        parameters = info.parameters

        offset = 0
        if info.takes_context:
            arguments.insert(0, self._context)
            offset = 1

        limit = info.ordered_parameter_count + offset
        if len(arguments) > limit:
            logger.debug("Filter %s: discarding %d extra argument(s)", name, len(arguments) - limit)
            del arguments[limit:]

        by_name: Dict[int, Any] = {}
        for index in range(offset, len(parameters)):
            key = convention.lookup_key(convention.get_member_name(parameters[index].name))
            if key in supplied:
                by_name[index] = supplied[key]

        for index in range(len(arguments), len(parameters)):
            parameter = parameters[index]
            if parameter.default is inspect.Parameter.empty and index not in by_name:
                raise MissingDefaultValueError(name, parameter.name)
            arguments.append(parameter.default)

        for index, value in by_name.items():
            arguments[index] = value

        for index in range(offset, len(parameters)):
            arguments[index] = self._coerce(name, info, parameters[index], arguments[index])

        positional = [
            value
            for parameter, value in zip(parameters, arguments)
            if parameter.kind is not inspect.Parameter.KEYWORD_ONLY
        ]
        keywords = {
            parameter.name: value
            for parameter, value in zip(parameters, arguments)
            if parameter.kind is inspect.Parameter.KEYWORD_ONLY
        }
        return info.function(*positional, **keywords)

    @staticmethod
    def _coerce(name: str, info: FilterInfo, parameter: inspect.Parameter, value: Any) -> Any:
        target = info.hints.get(parameter.name)
        if target not in _SCALAR_TYPES or not isinstance(value, _SCALAR_TYPES):
            return value
        if type(value) is target:
            return value
        if target is bool and is_number(value):
            return value != 0
        if isinstance(value, bool) and target in (int, float, Decimal):
            return target(int(value))
        converted, result = convert_scalar(value, target)
        if not converted:
            raise ArgumentConversionError(name, parameter.name, value, target)
        return result


def create_filter_registry(context: Context) -> Strainer:
    """Build the merged filter registry for one render."""
    return Strainer.create(context)


__all__ = [
    "Strainer",
    "create_filter_registry",
    "register_filter_provider",
    "register_filter_function",
    "unregister_filter_provider",
    "unregister_filter_function",
    "registered_filters",
    "restore_filters",
    "provider_filters",
]
