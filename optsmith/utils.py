"""
Optsmith utilities

Small helpers shared by the coercion, registry, and documentation layers.

- Unset: falsey singleton meaning "not provided" where None is a legitimate value
  (an option default of None means "no default").
- coalesce(value, default): replace Unset, keep every other value (None, 0, "").
- mirror("attr"): read-only property over self._attr; containers are copied on read.
- ordinal(number): position words for messages ("first", "second", "11th").
- mglob(pattern): expand "pkg.*" / "pkg.**.settings" into importable module names.
"""
import functools
import importlib
import pkgutil
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    Supports `str | Unset` in isinstance checks.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    return default if object is Unset else object


def _frozen(object):
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(_frozen(item) for item in object)
    if isinstance(object, Mapping):
        return {key: _frozen(value) for key, value in object.items()}
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Read-only property exposing the private attribute "_{name}".

    Sequences come back as tuples, mappings as fresh dicts and sets as frozensets,
    so callers never alias the owner's state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _frozen(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


_IDENTIFIER = re.compile(r"(?!\d)\w+")


@functools.cache
def _module_pattern(source):
    # '**' spans whole segments, '*' and '?' stay inside one segment
    parts = []
    for index, segment in enumerate(source.split(".")):
        if segment == "**":
            parts.append(r"(?:\.(?!\d)\w+)*")
            continue
        body = "".join(
            r"[^.]*" if char == "*" else r"[^.]" if char == "?" else re.escape(char)
            for char in segment
        )
        parts.append(body if index == 0 else r"\." + body)
    return re.compile("".join(parts))


def mglob(source, /):
    """
    Expand a dotted module pattern into sorted module names.

    Inside a segment '*' matches any run of characters and '?' one character;
    a '**' segment matches zero or more segments. The pattern must start with a
    concrete package, which is imported and walked. A name without wildcards is
    returned as is; an unimportable package yields no names.
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    if not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    segments = source.split(".")
    if all(_IDENTIFIER.fullmatch(segment) for segment in segments):
        return [source]

    prefixes = []
    for segment in segments:
        if not _IDENTIFIER.fullmatch(segment):
            break
        prefixes.append(segment)
    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    pattern = _module_pattern(source)
    matches = {prefix} if pattern.fullmatch(prefix) else set()
    for metadata in pkgutil.walk_packages(getattr(package, "__path__", ()), prefix + "."):
        if pattern.fullmatch(metadata.name):
            matches.add(metadata.name)
    return sorted(matches)


__all__ = (
    "coalesce",
    "mirror",
    "ordinal",
    "mglob",
    "UnsetType",
    "Unset",
)
