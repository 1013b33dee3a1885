"""
Optsmith documentation renderer: HTML documentation of a registry's options.

Output shape (HTML format, ungrouped)
    <ul>
      <li><b>-m</b> <b>--max-count=</b><i>int</i>. Maximum records. [default 10]</li>
    </ul>

Grouped output nests one list per group:
    <ul>
      <li>Input options
        <ul>
          <li>...</li>
        </ul>
      </li>
    </ul>

Rules
- unpublicized fields are never rendered; groups without a publicized field are
  skipped entirely (unpublicized groups that hold publicized fields are kept).
- a field's text is its source comment when the provider has a non-empty one
  (markup kept as-is), otherwise its declared description, HTML-escaped.
- the default is "default <text>" or "no default", HTML-escaped.
- repeatable (list) options carry " [+]" after their type.
- comment formats (javadoc: "* ", python: "# ") render the same lines, each
  prefixed with `padding` spaces and the marker, for embedding in source comments.
- option spellings come from the registry (prefix, short names, aliases), so the
  documentation always names options the way the parser accepts them.
"""
import html
import logging
from enum import Enum

from .faults import FaultCode, UnknownFormatError
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class Format(Enum):
    """
    output formats; comment formats carry the marker prefixed to every line.
    """
    HTML = "html"
    JAVADOC = "javadoc"
    PYTHON = "python"

    @property
    def marker(self):
        return {Format.JAVADOC: "* ", Format.PYTHON: "# "}.get(self)

    @classmethod
    def lookup(cls, name, /):
        if isinstance(name, Format):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownFormatError(
                "unrecognized output format %r" % (name,),
                title="unknown format",
                code=FaultCode.UNKNOWN_FORMAT,
                input=name,
                hint="use one of %s" % ", ".join(format.value for format in cls),
            ) from None


def escape(text, /):
    # apostrophes are left as is
    return html.escape(text, quote=False).replace('"', "&quot;")


def flatten(comment, /):
    """
    Comment → inline HTML: code fragments as <code>, cross references as a
    trailing "See: <code>a</code>, <code>b</code>." sentence.
    """
    parts = []
    for fragment in comment.fragments:
        if fragment.kind == "code":
            parts.append("<code>%s</code>" % escape(fragment.text))
        else:
            parts.append(fragment.text)
    if comment.see:
        parts.append(" See: %s." % ", ".join("<code>%s</code>" % escape(target) for target in comment.see))
    return "".join(parts)


class Renderer:
    """
    Renders one registry. Stateless apart from its configuration; safe to reuse.

    Parameters
    - registry: the Registry to document (read only)
    - comments: CommentProvider, or None for declared descriptions only
    - format: Format or its name ("html", "javadoc", "python")
    - grouping: Unset (follow registry.using_groups), True, or False
    - classdoc: prepend the first holder's class comment
    """

    def __init__(self, registry, comments=None, /, *, format=Format.HTML, grouping=Unset, classdoc=False):
        self._registry = registry
        self._comments = comments
        self._format = Format.lookup(format)
        self._grouping = bool(coalesce(grouping, registry.using_groups)) and registry.using_groups
        self._classdoc = bool(classdoc)

    @property
    def format(self):
        return self._format

    def describe(self, field, /):
        """
        text of one field: provider comment if any, else the escaped declared description.
        """
        comment = self._comments.comment_for(type(field.owner), field.name) if self._comments else None
        if comment:
            return flatten(comment) if self._format is Format.HTML else comment.text
        return escape(coalesce(field.descr, "") or "")

    def option(self, field, /):
        """
        the single line of HTML describing one option (without <li>).
        """
        parts = []
        if field.short_name is not None:
            parts.append("<b>-%s</b> " % field.short_name)
        for alias in field.aliases:
            parts.append("<b>%s</b> " % alias)
        parts.append("<b>%s=</b><i>%s</i>%s. " % (
            self._registry.spelling(field),
            field.descriptor.display,
            " [+]" if field.repeatable else "",
        ))
        default = "no default" if field.default_text is None else "default " + field.default_text
        parts.append("%s [%s]" % (self.describe(field), escape(default)))
        return "".join(parts)

    def _items(self, fields, padding):
        return [
            " " * padding + "<li>" + self.option(field) + "</li>"
            for field in fields
            if not field.unpublicized
        ]

    def html(self):
        """
        the documentation as HTML lines joined with newlines.
        """
        lines = []
        if self._classdoc:
            holder = self._registry.holders[0]
            comment = self._comments.class_comment(type(holder)) if self._comments else None
            if comment:
                lines.append(flatten(comment))
            lines.append("<p>Command line options: </p>")

        lines.append("<ul>")
        if not self._grouping:
            lines.extend(self._items(self._registry.fields, 2))
        else:
            for group in self._registry.groups:
                if not group.publicized:
                    continue
                lines.append("  <li>" + escape(group.name))
                lines.append("    <ul>")
                lines.extend(self._items(group.fields, 6))
                lines.append("    </ul>")
                lines.append("  </li>")
        lines.append("</ul>")
        return "\n".join(lines)

    def render(self, padding=0, /):
        """
        the documentation in the configured format; comment formats indent every
        line by `padding` spaces before the marker.
        """
        text = self.html()
        if self._format.marker is None:
            return text
        prefix = " " * padding + self._format.marker
        logger.debug("rendering %s comment block with %d spaces of padding", self._format.value, padding)
        return "\n".join(prefix + line for line in text.splitlines())


def render(registry, comments=None, /, *, format=Format.HTML, grouping=Unset, classdoc=False, padding=0):
    """
    Render a registry's documentation (see Renderer).
    """
    return Renderer(registry, comments, format=format, grouping=grouping, classdoc=classdoc).render(padding)


__all__ = (
    "Format",
    "Renderer",
    "render",
    "flatten",
    "escape",
)
