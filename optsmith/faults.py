"""
Optsmith faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain (declaration, parsing, documentation tool) so logs
  and searches stay predictable.
- OptionsException / OptionsWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (raise, or render and exit).

Taxonomy
- DeclarationError: a holder declares something the registry cannot bind
  (duplicate identity, no coercion path, dangling group marker). Raised while
  building a Registry; also a TypeError.
- ParseError: the argument vector is malformed for the declared options
  (unknown option, missing value, value failing coercion, forbidden repeat).
  Also a ValueError.
- ConfigurationError / SpliceError: the documentation tool was misconfigured or
  its target document lacks the sentinel lines.

Integration
- Library code raises faults directly; hosts that want shell behavior call
  trigger(fault, shell=True), which renders via rich on stderr and exits.
"""
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - declaration (111xx)
      • DUPLICATED_NAME, UNSUPPORTED_TYPE, DANGLING_GROUP, UNGROUPED_OPTION, MALFORMED_HOLDER
    - parsing (112xx)
      • UNKNOWN_OPTION, MISSING_VALUE, UNCOERCIBLE_VALUE, INVALID_CHOICE, DUPLICATED_OPTION
    - documentation tool (113xx)
      • CONFLICTING_FLAGS, MISSING_DOCFILE, SAME_FILE, UNKNOWN_FORMAT, NO_OPTIONS, MISSING_SENTINEL,
        UNLOADABLE_TARGET
    - warnings (12xxx)
      • SENTINEL_NOT_FOUND

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- declaration errors (111xx) ---
    DUPLICATED_NAME             = 11101
    UNSUPPORTED_TYPE            = 11102
    DANGLING_GROUP              = 11103
    UNGROUPED_OPTION            = 11104
    MALFORMED_HOLDER            = 11105

    # --- parse errors (112xx) ---
    UNKNOWN_OPTION              = 11201
    MISSING_VALUE               = 11202
    UNCOERCIBLE_VALUE           = 11203
    INVALID_CHOICE              = 11204
    DUPLICATED_OPTION           = 11205

    # --- documentation tool errors (113xx) ---
    CONFLICTING_FLAGS           = 11301
    MISSING_DOCFILE             = 11302
    SAME_FILE                   = 11303
    UNKNOWN_FORMAT              = 11304
    NO_OPTIONS                  = 11305
    MISSING_SENTINEL            = 11306
    UNLOADABLE_TARGET           = 11307

    # --- warnings (12xxx) ---
    SENTINEL_NOT_FOUND          = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderable(fault, palette, kind):
    """
    build the rich renderable shared by exceptions and warnings.

    options read from the fault
    - code, title, hint: header and footer copy
    - colorful (default True), fancy (default False), prog (default "optsmith")
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", options.get("prog", "optsmith")), styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
        " | ",
        text(str(options.get("title", kind)).title(), styler(kind + "-title")),
        " ]"
    )
    message = text(fault.message, styler(kind + "-message"))
    parts = [message]
    if options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class OptionsException(Exception):
    """
    base type of every optsmith error.

    carries a lowercase, position-first message plus a read-only mapping of
    context options (code, title, hint, token, index, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # context options double as read-only attributes (e.g. error.token)
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _renderable(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeclarationError(OptionsException, TypeError): ...
class ParseError(OptionsException, ValueError): ...
class UnknownOptionError(ParseError): ...
class MissingValueError(ParseError): ...
class CoercionError(ParseError): ...
class InvalidChoiceError(CoercionError): ...
class DuplicatedOptionError(ParseError): ...
class ConfigurationError(OptionsException): ...
class ConflictingFlagsError(ConfigurationError): ...
class MissingDocfileError(ConfigurationError): ...
class SameFileError(ConfigurationError): ...
class UnknownFormatError(ConfigurationError): ...
class NoOptionsError(ConfigurationError): ...
class UnloadableTargetError(ConfigurationError): ...
class SpliceError(OptionsException): ...


class OptionsWarning(Warning):
    """
    base type of every optsmith warning; rendered like OptionsException but never fatal.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _renderable(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingSentinelWarning(OptionsWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - with shell=True the fault is rendered via rich on stderr (errors then exit with
      status 1 unless deferred=True); otherwise errors are raised and warnings warned.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "OptionsException",
    "DeclarationError",
    "ParseError",
    "UnknownOptionError",
    "MissingValueError",
    "CoercionError",
    "InvalidChoiceError",
    "DuplicatedOptionError",
    "ConfigurationError",
    "ConflictingFlagsError",
    "MissingDocfileError",
    "SameFileError",
    "UnknownFormatError",
    "NoOptionsError",
    "UnloadableTargetError",
    "SpliceError",
    "OptionsWarning",
    "MissingSentinelWarning",
    "trigger",
)
