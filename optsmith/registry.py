"""
Optsmith registry: bind declared options to holders, parse argument vectors into them.

What this module provides
- OptionField: one option bound to one holder attribute (identity, type descriptor,
  default, description, visibility, group). Metadata only; values live in holders.
- OptionGroup: a named, ordered collection of fields.
- Assignments: the ordered (long name, value) pairs a parse produces.
- Registry: discovers Option/Group markers on holder instances, validates the
  declared option set, and parses argument vectors:
  • collect(args) → (assignments, remaining arguments), holders untouched.
  • apply(assignments) → writes values into the owning holders, in order.
  • parse(args) = collect + apply, returning the remaining (non-option) arguments.
  • parse_or_usage(args): parse, or print the fault plus usage and exit(1).
  • usage() / settings(): plain-text listings for help and diagnostics.

Token grammar
- "--name" / "--name=value": long names ('_' and '-' are interchangeable).
- "-name" / "-name=value": long names in single-dash mode.
- "-x" / "-x=value": short names.
- aliases match verbatim, including their dashes.
- value-taking options without "=value" consume the next token.
- boolean options never consume the next token: "--flag" means true.
- the first token not starting with '-' (or a lone '-') ends option scanning;
  a literal "--" ends it too and is dropped. Remaining tokens are returned verbatim.

Quick start
    from optsmith import Option, Registry

    class Settings:
        count = Option("-c", type=int, default=1, descr="how many")
        verbose = Option("-v", default=False)

    settings = Settings()
    rest = Registry(settings).parse(["-c", "5", "--verbose", "input.txt"])
    # settings.count == 5, settings.verbose is True, rest == ["input.txt"]
"""
import copy
import difflib
import inspect
import logging
import shlex

from rich.console import Console, Group as Renderables
from rich.table import Table
from rich.text import Text

from .arguments import Group, Option
from .coercion import COERCERS, TypeTag, coerce, describe, render
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


def _normalize(name, /):
    """
    lookup key of a long name: '_' and '-' are interchangeable on the command line.
    """
    return name.replace("_", "-")


class OptionField:
    """
    One declared option bound to one holder attribute.

    Properties
    - long_name: unique long name, without dashes ("max-count")
    - short_name: single-character alias without its dash, or None
    - aliases: extra spellings with their dashes
    - descriptor: TypeDescriptor of the declared type
    - default / default_text: value held when the registry was built, and its
      rendering (None for None and empty lists)
    - descr: declared description, or None
    - unpublicized: hidden from documentation and usage
    - group: group name, or None
    - owner / name: holder instance and attribute name
    """

    __introspectable__ = (
        "long_name",
        "short_name",
        "aliases",
        "descriptor",
        "default",
        "default_text",
        "descr",
        "unpublicized",
        "group",
        "name",
    )

    long_name = mirror("long_name")
    short_name = mirror("short_name")
    aliases = mirror("aliases")
    descriptor = mirror("descriptor")
    default_text = mirror("default_text")
    descr = mirror("descr")
    unpublicized = mirror("unpublicized")
    group = mirror("group")
    name = mirror("name")

    def __init__(self, marker, owner, /, *, long_name, descriptor, group):
        self._owner = owner
        self._name = marker.name
        self._long_name = long_name
        self._short_name = marker.short
        self._aliases = marker.aliases
        self._descriptor = descriptor
        self._descr = marker.descr
        self._unpublicized = marker.unpublicized
        self._group = group
        self._default = copy.copy(getattr(owner, marker.name))
        self._default_text = render(self._default, descriptor)

    @property
    def owner(self):
        return self._owner

    @property
    def default(self):
        return self._default

    @property
    def repeatable(self):
        return self._descriptor.repeatable

    @property
    def flag(self):
        """
        True for boolean options (bare "--name" means true).
        """
        return self._descriptor.tag is TypeTag.BOOLEAN

    def read(self):
        """
        current value of the bound holder attribute.
        """
        return getattr(self._owner, self._name)

    def __repr__(self):
        return "option-field(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


class OptionGroup:
    """
    A named collection of option fields, in declaration order.

    - unpublicized: declared on the Group marker; hides the group from usage text.
    - publicized: True when at least one member field is publicized (documentation
      skips groups for which this is False).
    """

    name = mirror("name")
    unpublicized = mirror("unpublicized")
    fields = mirror("fields")

    def __init__(self, name, /, *, unpublicized=False):
        self._name = name
        self._unpublicized = unpublicized
        self._fields = []

    @property
    def publicized(self):
        return any(not field.unpublicized for field in self._fields)

    def __iter__(self):
        return iter(tuple(self._fields))

    def __len__(self):
        return len(self._fields)

    def __repr__(self):
        return "option-group(name=%r, unpublicized=%r, fields=%r)" % (
            self._name, self._unpublicized, tuple(field.long_name for field in self._fields)
        )


class Assignments:
    """
    Ordered (long name, value) pairs produced by Registry.collect().

    Repeatable options contribute one pair per occurrence (each value a list);
    apply() replays the pairs in order, so the last write wins for single options.
    """

    def __init__(self, pairs=(), /):
        self._pairs = list(pairs)

    def append(self, name, value, /):
        self._pairs.append((name, value))

    def as_dict(self):
        """
        final value per long name (lists accumulated, last write wins otherwise).
        """
        result = {}
        for name, value in self._pairs:
            if isinstance(value, list):
                result.setdefault(name, []).extend(value)
            else:
                result[name] = value
        return result

    def __iter__(self):
        return iter(tuple(self._pairs))

    def __len__(self):
        return len(self._pairs)

    def __eq__(self, other):
        if isinstance(other, Assignments):
            return self._pairs == other._pairs
        return NotImplemented

    def __repr__(self):
        return "assignments(%r)" % (self._pairs,)


class Registry:
    """
    The option set of one or more holder instances.

    Parameters
    - *holders: configuration holder instances (classes are rejected).
    - use_single_dash: long options are spelled "-name" (in parsing, usage, and docs).
    - dashes: derive long names with '_' replaced by '-' (default True).
    - reject_repeats: a non-repeatable option given twice is a DuplicatedOptionError
      instead of "last write wins".
    - coercers: Coercers registry consulted for custom types.

    Raises
    - DeclarationError: duplicate long/short names or aliases, a field type with no
      coercion path, a Group marker not followed by an option, ungrouped options
      while groups are in use, or a holder without options.
    """

    fields = mirror("fields")
    groups = mirror("groups")
    holders = mirror("holders")
    use_single_dash = mirror("use_single_dash")
    reject_repeats = mirror("reject_repeats")
    dashes = mirror("dashes")

    def __init__(self, *holders, use_single_dash=False, dashes=True, reject_repeats=False, coercers=COERCERS):
        self._holders = list(holders)
        self._use_single_dash = bool(use_single_dash)
        self._dashes = bool(dashes)
        self._reject_repeats = bool(reject_repeats)
        self._coercers = coercers

        self._fields = []
        self._groups = []
        self._longs = {}
        self._shorts = {}
        self._aliases = {}

        if not holders:
            raise DeclarationError(
                "registry needs at least one holder",
                title="no holders",
                code=FaultCode.MALFORMED_HOLDER,
                hint="pass one or more configuration holder instances",
            )
        for holder in holders:
            self._bind(holder)

        if self.using_groups:
            for field in self._fields:
                if field.group is None:
                    raise DeclarationError(
                        "option %r of %s is not in a group, but groups are in use" % (
                            field.name, type(field.owner).__qualname__
                        ),
                        title="ungrouped option",
                        code=FaultCode.UNGROUPED_OPTION,
                        field=field.name,
                        hint="declare a Group(...) marker before the first option of %s" % type(field.owner).__qualname__,
                    )

        logger.debug("registry built with %d options in %d groups", len(self._fields), len(self._groups))

    @property
    def using_groups(self):
        return bool(self._groups)

    @property
    def prefix(self):
        """
        spelling prefix of long options ("--", or "-" in single-dash mode).
        """
        return "-" if self._use_single_dash else "--"

    def spelling(self, field, /):
        """
        command-line spelling of a field's long name ("--max-count").
        """
        return self.prefix + field.long_name

    def spellings(self):
        """
        every accepted spelling, for suggestions and diagnostics.
        """
        names = []
        for field in self._fields:
            if field.short_name:
                names.append("-" + field.short_name)
            names.extend(field.aliases)
            names.append(self.spelling(field))
        return names

    def _markers(self, holder):
        """
        Option/Group markers of a holder's class, base classes first, in declaration order.
        """
        markers = {}
        for klass in reversed(type(holder).__mro__):
            for name, object in vars(klass).items():
                if isinstance(object, Option | Group):
                    markers[name] = object
                elif name in markers:
                    del markers[name]  # overridden by a plain attribute
        return markers

    def _bind(self, holder):
        if inspect.isclass(holder) or inspect.ismodule(holder):
            raise DeclarationError(
                "registry holders must be instances, not %r" % (holder,),
                title="malformed holder",
                code=FaultCode.MALFORMED_HOLDER,
                hint="instantiate the holder class first (for example %s())" % getattr(holder, "__name__", "Holder"),
            )
        owner = type(holder).__qualname__
        group = None
        pending = None
        count = 0

        for name, marker in self._markers(holder).items():
            if isinstance(marker, Group):
                if pending is not None:
                    raise self._dangling(owner, pending)
                pending = marker
                continue
            if pending is not None:
                group = self._open_group(owner, pending)
                pending = None
            self._register(holder, owner, marker, group)
            count += 1

        if pending is not None:
            raise self._dangling(owner, pending)
        if not count:
            raise DeclarationError(
                "holder %s declares no options" % owner,
                title="malformed holder",
                code=FaultCode.MALFORMED_HOLDER,
                hint="declare class attributes with Option(...)",
            )

    @staticmethod
    def _dangling(owner, marker):
        return DeclarationError(
            "group %r of %s is not followed by an option" % (marker.title, owner),
            title="dangling group",
            code=FaultCode.DANGLING_GROUP,
            group=marker.title,
            hint="declare the first option of the group right after its Group(...) marker",
        )

    def _open_group(self, owner, marker):
        if any(group.name == marker.title for group in self._groups):
            raise DeclarationError(
                "group %r of %s is declared twice" % (marker.title, owner),
                title="duplicated group",
                code=FaultCode.DUPLICATED_NAME,
                group=marker.title,
                hint="give every group a distinct title",
            )
        group = OptionGroup(marker.title, unpublicized=marker.unpublicized)
        self._groups.append(group)
        return group

    def _register(self, holder, owner, marker, group):
        if not (stem := marker.name.strip("_")):
            raise DeclarationError(
                "option attribute %r of %s has no usable name" % (marker.name, owner),
                title="malformed holder",
                code=FaultCode.MALFORMED_HOLDER,
                hint="name option attributes with letters (for example max_count)",
            )
        long_name = _normalize(stem) if self._dashes else stem

        try:
            descriptor = describe(marker.type, marker.separator, self._coercers)
        except DeclarationError as error:
            raise DeclarationError(
                "option %r of %s: %s" % (marker.name, owner, error.message),
                **error.options | {"field": marker.name, "holder": owner},
            ) from error

        def duplicated(spelling):
            return DeclarationError(
                "option %r of %s reuses the name %r" % (marker.name, owner, spelling),
                title="duplicated name",
                code=FaultCode.DUPLICATED_NAME,
                field=marker.name,
                holder=owner,
                name=spelling,
                hint="every long name, short name, and alias must be unique across all holders",
            )

        if (key := _normalize(long_name)) in self._longs or any(
            _normalize(alias.lstrip("-")) == key for alias in self._aliases
        ):
            raise duplicated(long_name)
        if marker.short is not None and marker.short in self._shorts:
            raise duplicated("-" + marker.short)
        # with one dash, "-v" is both a short name and a one-letter long name
        if self._use_single_dash:
            if key in self._shorts:
                raise duplicated("-" + key)
            if marker.short is not None and marker.short in self._longs:
                raise duplicated("-" + marker.short)
        for alias in marker.aliases:
            if alias in self._aliases or _normalize(alias.lstrip("-")) in self._longs:
                raise duplicated(alias)

        field = OptionField(marker, holder, long_name=long_name, descriptor=descriptor, group=group and group.name)

        self._fields.append(field)
        self._longs[key] = field
        if field.short_name is not None:
            self._shorts[field.short_name] = field
        for alias in field.aliases:
            self._aliases[alias] = field
        if group is not None:
            group._fields.append(field)

        logger.debug("bound option %s%s to %s.%s (%s)", self.prefix, long_name, owner, marker.name, descriptor.display)
        return field

    def __getitem__(self, name):
        """
        field by long name (either '_' or '-' spelling).
        """
        return self._longs[_normalize(name)]

    def __contains__(self, name):
        return isinstance(name, str) and _normalize(name) in self._longs

    def __iter__(self):
        return iter(tuple(self._fields))

    def __len__(self):
        return len(self._fields)

    def _resolve(self, token, position):
        """
        map one option token to (field, spelling, inline value or None).
        """
        spelling, separator, value = token.partition("=")
        value = value if separator else None

        field = self._aliases.get(spelling)
        if field is None:
            if spelling.startswith("--"):
                field = self._longs.get(_normalize(spelling[2:]))
            else:
                stem = spelling[1:]
                if len(stem) == 1:
                    field = self._shorts.get(stem)
                if field is None and self._use_single_dash:
                    field = self._longs.get(_normalize(stem))

        if field is None:
            suggestions = difflib.get_close_matches(spelling, self.spellings(), 5)
            try:
                hint = "did you mean %r? run with --help to see all options" % suggestions[0]
            except IndexError:
                hint = "run with --help to see all options"
            raise UnknownOptionError(
                "unknown option %r at %s position" % (spelling, ordinal(position)),
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                token=token,
                input=spelling,
                index=position,
                suggestions=tuple(suggestions),
                hint=hint,
            )
        return field, spelling, value

    def collect(self, args, /):
        """
        Parse an argument vector without touching the holders.

        Parameters
        - args: Iterable[str] (a single str is split shell-style with shlex)

        Returns
        - (Assignments, list[str]): the parsed values in token order, and the
          non-option arguments that follow option scanning, verbatim.

        Raises
        - UnknownOptionError, MissingValueError, CoercionError (InvalidChoiceError),
          DuplicatedOptionError.
        """
        if isinstance(args, str):
            args = shlex.split(args)
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("collect() argument must be an iterable of strings")

        assignments = Assignments()
        seen = set()
        index = 0

        while index < len(tokens):
            token = tokens[index]
            position = index + 1

            if token == "--":
                return assignments, tokens[index + 1:]
            if not token.startswith("-") or token == "-":
                return assignments, tokens[index:]

            field, spelling, value = self._resolve(token, position)

            if value is None and field.flag:
                parsed = True
            else:
                if value is None:
                    if index + 1 >= len(tokens):
                        raise MissingValueError(
                            "option %r at %s position requires a value" % (spelling, ordinal(position)),
                            title="missing value",
                            code=FaultCode.MISSING_VALUE,
                            token=token,
                            input=spelling,
                            index=position,
                            expected=field.descriptor.display,
                            hint="pass a %s after it (for example %s=<%s>)" % (
                                field.descriptor.display, spelling, field.descriptor.display
                            ),
                        )
                    index += 1
                    value = tokens[index]
                try:
                    parsed = coerce(value, field.descriptor)
                except CoercionError as error:
                    raise type(error)(
                        "%s for option %r at %s position" % (error.message, spelling, ordinal(position)),
                        **error.options | {"input": spelling, "index": position},
                    ) from error

            if not field.repeatable and field.long_name in seen and self._reject_repeats:
                raise DuplicatedOptionError(
                    "option %r at %s position was already given" % (spelling, ordinal(position)),
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_OPTION,
                    token=token,
                    input=spelling,
                    index=position,
                    hint="give %s only once" % self.spelling(field),
                )
            seen.add(field.long_name)
            assignments.append(field.long_name, parsed)
            index += 1

        return assignments, []

    def apply(self, assignments, /):
        """
        Write collected values into the owning holders, in order.

        Single options are assigned (last write wins); repeatable options extend
        the holder's list.
        """
        for name, value in assignments:
            field = self._longs[_normalize(name)]
            if field.repeatable:
                current = field.read()
                if isinstance(current, list):
                    current.extend(value)
                else:
                    setattr(field.owner, field.name, [*(current or ()), *value])
            else:
                setattr(field.owner, field.name, value)
            logger.debug("set %s.%s from %s%s", type(field.owner).__qualname__, field.name, self.prefix, field.long_name)

    def parse(self, args, /):
        """
        Parse an argument vector into the holders; return the non-option arguments.

        On error, nothing has been written (values are applied after a successful scan).
        """
        assignments, rest = self.collect(args)
        self.apply(assignments)
        return rest

    def parse_or_usage(self, args, /, *, prog=Unset):
        """
        Like parse(), but a ParseError prints the usage text and the fault to stderr
        and exits with status 1.
        """
        try:
            return self.parse(args)
        except ParseError as fault:
            Console(stderr=True).print(self)
            trigger(fault, shell=True, prog=coalesce(prog, "optsmith"))

    def _rows(self, fields, *, include_unpublicized):
        rows = []
        for field in fields:
            if field.unpublicized and not include_unpublicized:
                continue
            names = []
            if field.short_name:
                names.append("-" + field.short_name)
            names.extend(field.aliases)
            if field.flag:
                names.append(self.spelling(field))
            else:
                names.append("%s=<%s>" % (self.spelling(field), field.descriptor.display))
            if field.repeatable:
                names.append("[+]")
            described = coalesce(field.descr, "") or ""
            if field.default_text is not None:
                described = ("%s [default %s]" % (described, field.default_text)).strip()
            rows.append((" ".join(names), described))
        return rows

    def _sections(self, include_unpublicized):
        if not self.using_groups:
            return [(None, self._rows(self._fields, include_unpublicized=include_unpublicized))]
        sections = []
        for group in self._groups:
            if group.unpublicized and not include_unpublicized:
                continue
            if rows := self._rows(group.fields, include_unpublicized=include_unpublicized):
                sections.append((group.name, rows))
        return sections

    def usage(self, *, include_unpublicized=False):
        """
        Plain-text usage listing (one line per option, grouped when groups are used).

        Unpublicized options and unpublicized groups are left out unless requested.
        """
        sections = self._sections(include_unpublicized)
        width = max((len(names) for _, rows in sections for names, _ in rows), default=0)
        lines = []
        for title, rows in sections:
            if title is not None:
                if lines:
                    lines.append("")
                lines.append(title + ":")
            for names, described in rows:
                lines.append(("  %s  %s" % (names.ljust(width), described)).rstrip())
        return "\n".join(lines)

    def settings(self, *, include_unpublicized=True):
        """
        Current value of every option, one "name=value" line each (for diagnostics).
        """
        lines = []
        for field in self._fields:
            if field.unpublicized and not include_unpublicized:
                continue
            lines.append("%s=%s" % (field.long_name, coalesce(render(field.read(), field.descriptor), "")))
        return "\n".join(lines)

    def __rich__(self):
        renders = []
        for title, rows in self._sections(False):
            if title is not None:
                renders.append(Text(title, style="bold"))
            table = Table.grid(padding=(0, 2))
            table.add_column(style="bold cyan")
            table.add_column(style="#9CA3AF")
            for names, described in rows:
                table.add_row(names, described)
            renders.append(table)
        return Renderables(*renders)

    def __repr__(self):
        return "registry(fields=%r, use_single_dash=%r)" % (
            tuple(field.long_name for field in self._fields), self._use_single_dash
        )


__all__ = (
    "OptionField",
    "OptionGroup",
    "Assignments",
    "Registry",
)
