"""User-supplied custom data function: loading and invocation."""

from __future__ import annotations

from dataclasses import dataclass
import importlib
from typing import TYPE_CHECKING, Callable

from bs4 import BeautifulSoup

from .errors import ConfigurationError, CustomHookError
from .types import FetchResult, JSONValue, UnitOfWork

if TYPE_CHECKING:
    from .config import CrawlConfig


@dataclass(frozen=True, slots=True)
class HookContext:
    """Everything a custom data function may look at for one page."""

    soup: BeautifulSoup
    unit: UnitOfWork
    fetch_result: FetchResult
    html: str
    config: "CrawlConfig"


CustomDataFunction = Callable[[HookContext], JSONValue]


@dataclass(frozen=True, slots=True)
class CustomHook:
    """A resolved custom data function plus the dotted path it came from."""

    name: str
    function: CustomDataFunction

    def __call__(self, context: HookContext) -> JSONValue:
        try:
            return self.function(context)
        except Exception as exc:
            raise CustomHookError(
                self.name,
                context.unit.url,
                detail=f"{exc.__class__.__name__}: {exc}",
            ) from exc


def load_custom_hook(dotted_path: str) -> CustomHook:
    """Resolve `package.module:function` into a callable hook."""

    module_name, sep, attr_path = dotted_path.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(
            f"Custom data function must look like 'package.module:function', got {dotted_path!r}"
        )

    try:
        target = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import custom data module {module_name!r}: {exc}") from exc

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise ConfigurationError(f"Custom data function {dotted_path!r} not found") from exc

    if not callable(target):
        raise ConfigurationError(f"Custom data function {dotted_path!r} is not callable")

    return CustomHook(name=dotted_path, function=target)


__all__ = [
    "CustomDataFunction",
    "CustomHook",
    "HookContext",
    "load_custom_hook",
]
