"""Multi-provider routing: adapters, registry, normalizer and HTTP routes."""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "ProviderRegistry",
    "build_registry",
    "router",
]

_LAZY_IMPORTS: dict[str, tuple[str, str | None]] = {
    "ProviderRegistry": ("routing.registry", "ProviderRegistry"),
    "build_registry": ("routing.registry", "build_registry"),
    "router": ("routing.routes", "router"),
    "service": ("routing.service", None),
}


def __getattr__(name: str):
    target = _LAZY_IMPORTS.get(name)
    if not target:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    module_name, attr_name = target
    module = import_module(module_name)
    return module if attr_name is None else getattr(module, attr_name)


def __dir__():
    return sorted(set(globals()) | set(_LAZY_IMPORTS))
