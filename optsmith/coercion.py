"""
Optsmith value coercion: textual arguments to typed values.

Overview
- TypeDescriptor: what an option's declared Python type means to the parser
  (a tag, the display name used in docs and messages, the list separator, and the
  parsing function for custom types).
- describe(type): build a descriptor from a Python type, failing fast
  (DeclarationError) when the type has no coercion path.
- coerce(text, descriptor): the pure text → value conversion used by the registry.
- render(value, descriptor): the inverse used for default-value text, so that a
  rendered default always parses back through coerce().
- Coercers / COERCERS / coercible: the registry of parsing functions for custom
  types (pathlib.Path is registered out of the box).

Supported types
- bool            → boolean ("true"/"false", case-insensitive)
- int, float      → integer / floating (Python's own numeric parsers)
- str             → string (verbatim)
- enum.Enum       → enumeration (case-sensitive member names)
- list[T]         → list of any of the above, split on a separator (default ",")
- anything else   → custom, only when a parsing function is registered

Example
    >>> coerce("3,4,5", describe(list[int]))
    [3, 4, 5]
    >>> coerce("", describe(list[int]))
    []
"""
import enum
import inspect
import pathlib
import typing
from enum import Enum

from .faults import CoercionError, DeclarationError, FaultCode, InvalidChoiceError
from .utils import Unset, coalesce, mirror


class TypeTag(Enum):
    """
    kinds of values an option can carry.
    """
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOATING = "floating"
    STRING = "string"
    ENUMERATION = "enumeration"
    LIST = "list"
    CUSTOM = "custom"


_DISPLAY_NAMES = {
    TypeTag.BOOLEAN: "boolean",
    TypeTag.INTEGER: "int",
    TypeTag.FLOATING: "float",
    TypeTag.STRING: "string",
}


class TypeDescriptor:
    """
    Immutable description of how to coerce text into one option type.

    Properties
    - tag: TypeTag
    - type: the declared Python type (list[int] for lists)
    - element: TypeDescriptor of list items, or None
    - separator: list separator (only meaningful for lists)
    - function: parsing function for custom types, or None
    - display: name shown in documentation and messages ("int", "string", "Color", ...)
    - repeatable: True for lists (every occurrence accumulates)
    """

    tag = mirror("tag")
    type = mirror("type")
    element = mirror("element")
    separator = mirror("separator")
    function = mirror("function")

    def __init__(self, tag, type, /, *, element=None, separator=",", function=None):
        self._tag = tag
        self._type = type
        self._element = element
        self._separator = separator
        self._function = function

    @property
    def display(self):
        if self._tag is TypeTag.LIST:
            return self._element.display
        try:
            return _DISPLAY_NAMES[self._tag]
        except KeyError:
            return getattr(self._type, "__name__", str(self._type))

    @property
    def repeatable(self):
        return self._tag is TypeTag.LIST

    def __eq__(self, other):
        if not isinstance(other, TypeDescriptor):
            return NotImplemented
        return (self._tag, self._type, self._element, self._separator) == (
            other._tag, other._type, other._element, other._separator
        )

    def __hash__(self):
        return hash((self._tag, self._type, self._separator))

    def __repr__(self):
        if self._tag is TypeTag.LIST:
            return "type-descriptor(tag=%s, element=%r, separator=%r)" % (self._tag.value, self._element, self._separator)
        return "type-descriptor(tag=%s, display=%r)" % (self._tag.value, self.display)


class Coercers:
    """
    Registry of parsing functions for custom option types.

    A parsing function takes the raw argument text and returns the value, raising
    ValueError or TypeError when the text is not acceptable. Lookups follow the
    method resolution order, so registering a base class covers its subclasses.
    """

    def __init__(self, functions=(), /):
        self._functions = dict(functions)

    def register(self, type, function=Unset, /):
        """
        Register `function` as the parser for `type`.

        Forms
        - coercers.register(Version, Version.parse)
        - @coercers.register(Version) applied to a parsing function
        """
        if not inspect.isclass(type):
            raise TypeError("register() first argument must be a class")
        if function is Unset:
            def wrapper(function, /):
                return self.register(type, function)
            return wrapper
        if not callable(function):
            raise TypeError("register() second argument must be callable")
        self._functions[type] = function
        return function

    def lookup(self, type, /):
        for base in getattr(type, "__mro__", (type,)):
            try:
                return self._functions[base]
            except KeyError:
                continue
        return None

    def copy(self):
        return Coercers(self._functions)

    def __contains__(self, type):
        return self.lookup(type) is not None

    def __repr__(self):
        return "coercers(%s)" % ", ".join(getattr(type, "__name__", repr(type)) for type in self._functions)


COERCERS = Coercers({pathlib.Path: pathlib.Path, pathlib.PurePath: pathlib.PurePath})
"""
Process-wide default registry consulted by describe() and Registry().
"""


def coercible(cls=Unset, /, *, coercers=COERCERS):
    """
    Class decorator: register the class' own single-argument constructor as its parser.

    Usage
        @coercible
        class Version:
            def __init__(self, text): ...

    Raises
    - TypeError: when the constructor cannot be called with exactly one string.
    """
    if cls is Unset:
        return lambda cls: coercible(cls, coercers=coercers)
    if not inspect.isclass(cls):
        raise TypeError("@coercible must be applied to a class")
    try:
        inspect.signature(cls).bind("")
    except TypeError:
        raise TypeError("@coercible class %r must accept a single string argument" % cls.__name__) from None
    except ValueError:
        pass  # builtins without a signature; trust them
    coercers.register(cls, cls)
    return cls


def _name(type):
    return getattr(type, "__name__", None) or repr(type)


def describe(type, /, separator=",", coercers=COERCERS):
    """
    Build the TypeDescriptor of a declared option type.

    Raises
    - DeclarationError: the type (or a list's item type) has no coercion path,
      lists are nested, or the separator is not a non-empty string.
    """
    if not isinstance(separator, str) or not separator:
        raise DeclarationError(
            "list separator must be a non-empty string, not %r" % (separator,),
            title="bad separator",
            code=FaultCode.UNSUPPORTED_TYPE,
            hint="use a single character such as ',' or ':'",
        )

    if typing.get_origin(type) is list:
        arguments = typing.get_args(type)
        if len(arguments) != 1:
            raise DeclarationError(
                "list type %r must declare exactly one item type" % (type,),
                title="unsupported type",
                code=FaultCode.UNSUPPORTED_TYPE,
                hint="declare the item type, for example list[int]",
            )
        element = describe(arguments[0], separator, coercers)
        if element.tag is TypeTag.LIST:
            raise DeclarationError(
                "nested list type %r is not supported" % (type,),
                title="unsupported type",
                code=FaultCode.UNSUPPORTED_TYPE,
                hint="use a flat list such as list[str] with a custom separator",
            )
        return TypeDescriptor(TypeTag.LIST, type, element=element, separator=separator)

    if type is list:
        return describe(list[str], separator, coercers)

    # bool first: it is a subclass of int
    if type is bool:
        return TypeDescriptor(TypeTag.BOOLEAN, bool)
    if type is int:
        return TypeDescriptor(TypeTag.INTEGER, int)
    if type is float:
        return TypeDescriptor(TypeTag.FLOATING, float)
    if type is str:
        return TypeDescriptor(TypeTag.STRING, str)
    if inspect.isclass(type) and issubclass(type, enum.Enum):
        if not len(type):
            raise DeclarationError(
                "enumeration %r declares no members" % _name(type),
                title="unsupported type",
                code=FaultCode.UNSUPPORTED_TYPE,
                hint="add at least one member to the enumeration",
            )
        return TypeDescriptor(TypeTag.ENUMERATION, type)

    if (function := coercers.lookup(type)) is not None:
        return TypeDescriptor(TypeTag.CUSTOM, type, function=function)

    raise DeclarationError(
        "type %r has no coercion path" % _name(type),
        title="unsupported type",
        code=FaultCode.UNSUPPORTED_TYPE,
        type=type,
        hint="register a parser with coercers.register(%s, ...) or decorate the class with @coercible" % _name(type),
    )


def coerce(text, descriptor, /):
    """
    Convert one argument text into a value of the descriptor's type.

    Raises
    - CoercionError: the text is not a valid value (message names the token and the
      expected type).
    - InvalidChoiceError: the text is not one of an enumeration's member names.
    """
    if not isinstance(text, str):
        raise TypeError("coerce() first argument must be a string")

    def fail(reason=Unset):
        return CoercionError(
            "invalid %s value %r%s" % (descriptor.display, text, coalesce(reason and ": " + reason, "")),
            title="invalid value",
            code=FaultCode.UNCOERCIBLE_VALUE,
            token=text,
            expected=descriptor.display,
            hint="pass a valid %s value" % descriptor.display,
        )

    match descriptor.tag:
        case TypeTag.BOOLEAN:
            match text.lower():
                case "true":
                    return True
                case "false":
                    return False
            raise CoercionError(
                "invalid boolean value %r" % text,
                title="invalid value",
                code=FaultCode.UNCOERCIBLE_VALUE,
                token=text,
                expected=descriptor.display,
                hint="use 'true' or 'false'",
            )
        case TypeTag.INTEGER:
            try:
                return int(text)
            except ValueError:
                raise fail() from None
        case TypeTag.FLOATING:
            try:
                return float(text)
            except ValueError:
                raise fail() from None
        case TypeTag.STRING:
            return text
        case TypeTag.ENUMERATION:
            try:
                return descriptor.type[text]
            except KeyError:
                choices = tuple(descriptor.type.__members__)
                raise InvalidChoiceError(
                    "invalid %s value %r (choose from %s)" % (descriptor.display, text, ", ".join(map(repr, choices))),
                    title="invalid choice",
                    code=FaultCode.INVALID_CHOICE,
                    token=text,
                    expected=descriptor.display,
                    choices=choices,
                    hint="use one of %s (names are case-sensitive)" % ", ".join(choices),
                ) from None
        case TypeTag.LIST:
            if not text:
                return []
            return [coerce(token, descriptor.element) for token in text.split(descriptor.separator)]
        case TypeTag.CUSTOM:
            try:
                return descriptor.function(text)
            except (ValueError, TypeError) as error:
                raise fail(str(error) or Unset) from error
    raise AssertionError("unreachable type tag %r" % descriptor.tag)


def render(value, descriptor, /):
    """
    Render a value as the text coerce() would accept for it.

    Returns None when there is nothing to show (None, or an empty list).
    """
    if value is None:
        return None
    match descriptor.tag:
        case TypeTag.BOOLEAN:
            return "true" if value else "false"
        case TypeTag.ENUMERATION:
            return value.name if isinstance(value, enum.Enum) else str(value)
        case TypeTag.LIST:
            if not value:
                return None
            return descriptor.separator.join(coalesce(render(item, descriptor.element), "") for item in value)
    return str(value)


__all__ = (
    "TypeTag",
    "TypeDescriptor",
    "Coercers",
    "COERCERS",
    "coercible",
    "describe",
    "coerce",
    "render",
)
