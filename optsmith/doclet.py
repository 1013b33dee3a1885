"""
Optsmith documentation tool: document the options of holder classes.

Usage
    optsmith-doc [flags] target...
    python -m optsmith [flags] target...

Targets
- "package.module:Settings"   one holder class (nested classes as "Outer.Inner")
- "package.module"            every holder class defined in the module
- "package.**.settings"       every holder class of every matching module (see mglob)

Flags (single-dash long names)
- -docfile <path>   splice the documentation into this file, between the lines
                    "<!-- start options doc (DO NOT EDIT BY HAND) -->" and
                    "<!-- end options doc -->"
- -outfile <path>   write the result to this file instead of standard out
- -i                write the result back into the docfile (requires -docfile,
                    excludes -outfile)
- -format <name>    html (default), javadoc, or python; the comment formats
                    prefix every line with "* " or "# " so the block can live in
                    a source comment (the sentinels then carry the marker too)
- -classdoc         start with the first holder class' docstring
- -singledash       document long options as "-name" instead of "--name"
- -verbose          log progress on standard error
- -help             print the usage and exit

Holder classes are instantiated without arguments; the values they hold then
are documented as the defaults. Flags are validated before any file is read.

Exit status: 0 on success, 1 when a fault is reported, 2 on malformed flags.
"""
import importlib
import inspect
import logging
import sys
from pathlib import Path

from rich.console import Console

from .arguments import Option
from .comments import SourceComments
from .faults import *
from .log import setup_logging
from .registry import Registry
from .renderer import Format, Renderer
from .splicer import Splicer
from .utils import mglob

logger = logging.getLogger(__name__)

PROG = "optsmith-doc"


class DocletSettings:
    """
    Flags of the documentation tool, parsed in single-dash mode.
    """

    docfile = Option(type=Path, descr="file into which options documentation is inserted")
    outfile = Option(type=Path, descr="destination for the output (default: standard out)")
    in_place = Option("-i", default=False, descr="write the output back into the docfile")
    format = Option(default="html", descr="output format: html, javadoc, or python")
    classdoc = Option(default=False, descr="include the first holder class' documentation")
    singledash = Option(default=False, descr="document long options with a single dash")
    verbose = Option(default=False, descr="log progress to standard error")
    help = Option(default=False, descr="print this usage and exit")


def usage(registry, /):
    return "usage: %s [flags] target...\n\n%s" % (PROG, registry.usage())


def _declares_options(cls):
    return any(isinstance(object, Option) for klass in cls.__mro__ for object in vars(klass).values())


def _unloadable(message, target, hint):
    return UnloadableTargetError(
        message,
        title="unloadable target",
        code=FaultCode.UNLOADABLE_TARGET,
        target=target,
        hint=hint,
    )


def _classes(target):
    """
    holder classes named by one target, in declaration order.
    """
    pattern, _, qualname = target.partition(":")
    try:
        names = mglob(pattern)
    except ValueError as error:
        raise _unloadable(str(error), target, "use a dotted module name or pattern such as app.**.settings") from error
    if not names:
        raise _unloadable("no module matches %r" % pattern, target, "check the pattern and that the package is importable")

    classes = []
    for name in names:
        try:
            module = importlib.import_module(name)
        except ImportError as error:
            raise _unloadable("unable to import module %r" % name, target, "check that %s is on the python path" % name) from error
        if qualname:
            object = module
            for part in qualname.split("."):
                object = getattr(object, part, None)
            if not inspect.isclass(object):
                raise _unloadable("module %r has no class %r" % (name, qualname), target, "name a class defined in %s" % name)
            classes.append(object)
            continue
        for object in vars(module).values():
            if inspect.isclass(object) and object.__module__ == module.__name__ and _declares_options(object):
                classes.append(object)
    logger.debug("target %r names %d holder classes", target, len(classes))
    return classes


def _read(path):
    with open(path, encoding="utf-8", newline="") as stream:
        return stream.read()


def _write(path, text):
    with open(path, "w", encoding="utf-8", newline="") as stream:
        stream.write(text)


class Doclet:
    """
    One run of the documentation tool over parsed settings and targets.

    run() = validate() → holders() → generate() → write(); every step may raise
    an OptionsException (ConfigurationError subclasses for misuse).
    """

    def __init__(self, settings, targets=(), /):
        self._settings = settings
        self._targets = list(targets)
        self._format = Format.HTML

    @property
    def format(self):
        return self._format

    def validate(self):
        """
        Check the flags for consistency. Only stats the docfile, never reads it.
        """
        settings = self._settings
        if settings.in_place and settings.outfile is not None:
            raise ConflictingFlagsError(
                "-i and -outfile cannot be used together",
                title="conflicting flags",
                code=FaultCode.CONFLICTING_FLAGS,
                hint="drop -outfile to rewrite the docfile, or drop -i to write elsewhere",
            )
        if settings.in_place and settings.docfile is None:
            raise ConflictingFlagsError(
                "-i requires -docfile",
                title="conflicting flags",
                code=FaultCode.CONFLICTING_FLAGS,
                hint="name the file to rewrite with -docfile <path>",
            )
        if settings.docfile is not None and not settings.docfile.is_file():
            raise MissingDocfileError(
                "docfile %r does not exist" % str(settings.docfile),
                title="missing docfile",
                code=FaultCode.MISSING_DOCFILE,
                path=settings.docfile,
                hint="create the file with the sentinel lines first",
            )
        if (
            settings.docfile is not None and
            settings.outfile is not None and
            settings.docfile.resolve() == settings.outfile.resolve()
        ):
            raise SameFileError(
                "docfile and outfile are the same file %r" % str(settings.docfile),
                title="same file",
                code=FaultCode.SAME_FILE,
                path=settings.docfile,
                hint="use -i to rewrite the docfile in place",
            )
        self._format = Format.lookup(settings.format)
        if not self._targets:
            raise NoOptionsError(
                "no targets given",
                title="no options",
                code=FaultCode.NO_OPTIONS,
                hint="name a holder class (module:Class), a module, or a module pattern",
            )

    def holders(self):
        """
        Instances of every holder class named by the targets (each class once).

        A class that is a base of another named class is skipped: the derived
        holder already carries its options.
        """
        classes = []
        for target in self._targets:
            for cls in _classes(target):
                if cls not in classes:
                    classes.append(cls)
        classes = [cls for cls in classes if not any(other is not cls and issubclass(other, cls) for other in classes)]

        holders = []
        for cls in classes:
            try:
                holders.append(cls())
            except Exception as error:
                if isinstance(error, TypeError):
                    message = "holder class %s cannot be instantiated without arguments" % cls.__qualname__
                    hint = "give every constructor parameter of %s a default" % cls.__qualname__
                else:
                    message = "holder class %s failed to instantiate: %s" % (cls.__qualname__, error)
                    hint = "make %s() succeed without arguments" % cls.__qualname__
                raise _unloadable(message, cls.__qualname__, hint) from error
        if not holders:
            raise NoOptionsError(
                "no option declarations found in %s" % ", ".join(map(repr, self._targets)),
                title="no options",
                code=FaultCode.NO_OPTIONS,
                hint="targets must define classes with Option(...) attributes",
            )
        return holders

    def generate(self, holders, /):
        """
        The text to write: the rendered block, or the docfile with the block spliced in.
        """
        registry = Registry(*holders, use_single_dash=self._settings.singledash)
        renderer = Renderer(registry, SourceComments(), format=self._format, classdoc=self._settings.classdoc)

        if (docfile := self._settings.docfile) is None:
            return renderer.render()

        document = _read(docfile)
        splicer = Splicer.for_format(self._format)
        start, _ = splicer.locate(document)
        if start is None:
            trigger(MissingSentinelWarning(
                "docfile %r has no line %r; it is left unchanged" % (str(docfile), splicer.start),
                title="missing sentinel",
                code=FaultCode.SENTINEL_NOT_FOUND,
                hint="add the start and end sentinel lines where the documentation belongs",
            ), shell=True, prog=PROG)
            return document

        if (marker := self._format.marker) is None:
            block = renderer.render()
        else:
            def block(line):
                # align with the marker of the start sentinel
                return renderer.render(line.index(marker.strip()))
        return splicer.splice(document, block)

    def write(self, output, /):
        """
        Write to -outfile, the docfile (-i), or standard out, ending with a newline.
        """
        if not output.endswith(("\n", "\r")):
            output += "\n"
        settings = self._settings
        destination = settings.outfile if settings.outfile is not None else settings.docfile if settings.in_place else None
        if destination is None:
            sys.stdout.write(output)
            sys.stdout.flush()
            return
        _write(destination, output)
        logger.info("wrote %s", destination)

    def run(self):
        self.validate()
        self.write(self.generate(self.holders()))


def main(argv=None, /):
    """
    Entry point of optsmith-doc; returns the process exit status.
    """
    settings = DocletSettings()
    registry = Registry(settings, use_single_dash=True, reject_repeats=True)

    try:
        targets = registry.parse(sys.argv[1:] if argv is None else argv)
    except ParseError as fault:
        trigger(fault, shell=True, deferred=True, prog=PROG)
        Console(stderr=True).print(usage(registry), markup=False, highlight=False, soft_wrap=True)
        return 2

    if settings.help:
        Console().print(usage(registry), markup=False, highlight=False, soft_wrap=True)
        return 0

    setup_logging("DEBUG" if settings.verbose else None)
    logger.debug("documentation settings:\n%s", registry.settings())

    try:
        Doclet(settings, targets).run()
    except OptionsException as fault:
        trigger(fault, shell=True, deferred=True, prog=PROG)
        return 1
    except OSError as error:
        logger.error("%s", error)
        return 1
    return 0


__all__ = (
    "DocletSettings",
    "Doclet",
    "usage",
    "main",
)
