r"""
Optsmith declarative markers.

Overview
- Option: marks a class attribute of a configuration holder as a command-line
  option. The attribute name becomes the long option name ("max_count" →
  "--max-count"); the marker carries the short name hint, aliases, type, default,
  description, list separator, and visibility.
- Group: marks the start of an option group. The option declared immediately
  after a Group joins it, and so do the following options up to the next Group.

Example
    >>> class Settings:
    ...     _input = Group("input options")
    ...     #: Maximum number of records to read.
    ...     max_count = Option("-m", type=int, default=10)
    ...     tags = Option("--tag", type=list[str], descr="labels to attach")
    ...
    ...     _debug = Group("debugging options", unpublicized=True)
    ...     trace = Option(default=False, unpublicized=True)

Binding
- Option is a non-data descriptor: reading `settings.max_count` on an instance
  returns the instance's own value. The default is copied into the instance on
  first read, so list defaults are never shared between holders.
- Writing `settings.max_count = 3` stores into the instance as usual.

Metadata (sanitized on construction)
- names: Iterable[str] validated as shell-style names; at most one short name
  ("-x"), every other spelling is an alias kept verbatim (with its dashes).
- type: Unset | type; when Unset it is inferred from the default (str otherwise).
  list[T] declares a repeatable, separator-split list.
- default: Unset | object; Unset becomes False for booleans, [] for lists, None otherwise.
- descr: Unset | str, non-empty when provided (None when omitted).
- separator: Unset | str, non-empty when provided ("," when omitted).
- unpublicized: bool (hidden from documentation and usage, still parseable).

The registry (optsmith.registry) turns these markers into bound option fields;
type support is checked there, against the registry's coercers.
"""
import builtins
import copy
import re
import typing

from .utils import *

_NAME = re.compile(r"--?[^\W\d_](?:[\w-]*\w)?")
_SHORT = re.compile(r"-[^\W_]")


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate 'descr' and 'unpublicized'.

    Raises
    - TypeError: if 'descr' is not a string or Unset.
    - ValueError: if 'descr' is a string but empty after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)
    metadata["unpublicized"] = bool(metadata["unpublicized"])


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate names and split them into the short name and aliases.

    Accepted forms
    - short: "-x" (one letter or digit); at most one per option.
    - alias: "-long", "--long", "--long-name", "--long_name" (unicode letters allowed).

    Raises
    - TypeError: when a name is not a string or two short names are given.
    - ValueError: when a name is empty, malformed, or duplicated.
    """
    short = None
    aliases = []
    for name in metadata.pop("names"):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not _NAME.fullmatch(name) and not _SHORT.fullmatch(name):
            raise ValueError(f"{cls.__typename__} name {name!r} is not a valid shell-style option name")
        elif name == short or name in aliases:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        if _SHORT.fullmatch(name):
            if short is not None:
                raise TypeError(f"{cls.__typename__} cannot declare more than one short name ({short!r}, {name!r})")
            short = name
        else:
            aliases.append(name)
    metadata["short"] = short[1:] if short else None
    metadata["aliases"] = tuple(aliases)


def _sanitize_typed_metadata(cls, metadata, /):
    """
    Internal: infer the type from the default (or the default from the type).

    Rules
    - type Unset, default Unset/None → str
    - type Unset, default list → list[type of first item] (list[str] when empty)
    - type Unset, other default → type(default)
    - default Unset → False for bool, [] for lists, None otherwise
    - separator Unset → ","
    """
    type, default = metadata["type"], metadata["default"]

    if type is Unset:
        if default is Unset or default is None:
            type = str
        elif isinstance(default, list):
            type = list[builtins.type(default[0]) if default else str]
        else:
            type = builtins.type(default)
    elif not isinstance(type, builtins.type) and typing.get_origin(type) is None:
        raise TypeError(f"{cls.__typename__} 'type' must be a type")

    if default is Unset:
        if type is bool:
            default = False
        elif type is list or typing.get_origin(type) is list:
            default = []
        else:
            default = None

    if not isinstance(separator := metadata["separator"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'separator' must be a string")
    elif isinstance(separator, str) and not separator:
        raise ValueError(f"{cls.__typename__} 'separator' cannot be empty")

    metadata["type"] = type
    metadata["default"] = default
    metadata["separator"] = coalesce(separator, ",")


class Option:
    """
    Declarative marker for one command-line option (see module documentation).

    Properties
    - name: attribute name the marker is bound to (Unset until the class is created)
    - short: short name without its dash, or None
    - aliases: tuple of extra spellings, with their dashes
    - type, default, descr, separator, unpublicized: sanitized metadata
    """

    __typename__ = "option"
    __introspectable__ = (
        "name",
        "short",
        "aliases",
        "type",
        "default",
        "descr",
        "separator",
        "unpublicized",
    )

    name = mirror("name")
    short = mirror("short")
    aliases = mirror("aliases")
    type = mirror("type")
    descr = mirror("descr")
    separator = mirror("separator")
    unpublicized = mirror("unpublicized")

    def __init__(
            self,
            *names,
            type=Unset,
            default=Unset,
            descr=Unset,
            separator=Unset,
            unpublicized=False
    ):
        metadata = {
            "names": names,
            "type": type,
            "default": default,
            "descr": descr,
            "separator": separator,
            "unpublicized": unpublicized,
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_named_metadata(builtins.type(self), metadata)
        _sanitize_typed_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._name = Unset

    @property
    def default(self):
        # a copy, so that nobody mutates the declared default of a list option
        return copy.copy(self._default)

    def __set_name__(self, owner, name):
        if self._name is not Unset and self._name != name:
            raise TypeError(f"{type(self).__typename__} is already bound to {self._name!r}")
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self._name]
        except KeyError:
            return instance.__dict__.setdefault(self._name, self.default)

    def __repr__(self):
        return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


class Group:
    """
    Declarative marker opening an option group.

    Properties
    - title: human-readable group name (used as the documentation heading)
    - unpublicized: hide the whole group from usage text (documentation still
      lists it when it contains publicized options)
    - name: attribute name the marker is bound to
    """

    __typename__ = "group"
    __introspectable__ = (
        "name",
        "title",
        "unpublicized",
    )

    name = mirror("name")
    title = mirror("title")
    unpublicized = mirror("unpublicized")

    def __init__(self, title, /, *, unpublicized=False):
        if not isinstance(title, str):
            raise TypeError(f"{type(self).__typename__} 'title' must be a string")
        elif not (title := title.strip()):
            raise ValueError(f"{type(self).__typename__} 'title' cannot be empty")
        self._title = title
        self._unpublicized = bool(unpublicized)
        self._name = Unset

    def __set_name__(self, owner, name):
        self._name = name

    def __repr__(self):
        return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


__all__ = (
    "Option",
    "Group",
)
