"""
Optsmith comment providers: where option documentation text comes from.

The renderer never reads source code itself; it asks a provider for
- comment_for(owner_type, field_name): the comment of one option attribute, and
- class_comment(owner_type): the holder class' own documentation,
each returned as a Comment (or None when there is none).

Providers
- CommentProvider: the interface; returns None for everything.
- SourceComments: reads holder classes with inspect/ast. A field's comment is the
  string literal right after its assignment (attribute docstring), otherwise the
  "#:" lines right above it; a class comment is the class docstring.
- StaticComments: backed by a mapping, for hosts that extract comments elsewhere.

Comment markup
- Sphinx roles (:class:`Thing`, :py:func:`run`) and ``literals`` become "code"
  fragments; everything else is "text" (kept as-is, it may hold HTML).
- ":see: a, b" lines list cross references; the renderer appends them as
  "See: a, b." after the comment.
"""
import ast
import collections
import inspect
import logging
import re
import textwrap

from .utils import mirror

logger = logging.getLogger(__name__)

Fragment = collections.namedtuple("Fragment", ("kind", "text"))

_ROLE = re.compile(r":(?:[\w-]+:)*[\w-]+:`([^`]+)`|``([^`]+)``")
_SEE = re.compile(r"^\s*:see:\s*(.*)$")


class Comment:
    """
    Parsed documentation comment.

    Properties
    - raw: the text as supplied
    - text: cleaned text without ":see:" lines (markup untouched)
    - fragments: tuple of Fragment(kind, text), kind in {"text", "code"}
    - see: tuple of cross-reference targets
    """

    raw = mirror("raw")
    text = mirror("text")
    fragments = mirror("fragments")
    see = mirror("see")

    def __init__(self, raw, /, *, text, fragments, see):
        self._raw = raw
        self._text = text
        self._fragments = tuple(fragments)
        self._see = tuple(see)

    @classmethod
    def parse(cls, raw, /):
        if not isinstance(raw, str):
            raise TypeError("Comment.parse() argument must be a string")
        see = []
        lines = []
        for line in inspect.cleandoc(raw).splitlines():
            if match := _SEE.match(line):
                see.extend(target.strip() for target in match[1].split(",") if target.strip())
            else:
                lines.append(line)
        text = "\n".join(lines).strip()

        fragments = []
        cursor = 0
        for match in _ROLE.finditer(text):
            if match.start() > cursor:
                fragments.append(Fragment("text", text[cursor:match.start()]))
            fragments.append(Fragment("code", match[1] or match[2]))
            cursor = match.end()
        if cursor < len(text):
            fragments.append(Fragment("text", text[cursor:]))
        return cls(raw, text=text, fragments=fragments, see=see)

    def __bool__(self):
        return bool(self._text or self._see)

    def __eq__(self, other):
        if not isinstance(other, Comment):
            return NotImplemented
        return (self._text, self._fragments, self._see) == (other._text, other._fragments, other._see)

    def __hash__(self):
        return hash((self._text, self._see))

    def __repr__(self):
        return "comment(text=%r, see=%r)" % (self._text, self._see)


class CommentProvider:
    """
    Interface of comment sources. This base implementation knows no comments.
    """

    def comment_for(self, owner_type, field_name, /):
        return None

    def class_comment(self, owner_type, /):
        return None


class StaticComments(CommentProvider):
    """
    Comments from a mapping.

    Keys are (owner, field_name) for fields and (owner, None) for class comments,
    where owner is the holder class or its __qualname__. Values are strings or
    Comment objects.
    """

    def __init__(self, comments=(), /):
        self._comments = dict(comments)

    def _lookup(self, owner_type, name):
        for key in ((owner_type, name), (owner_type.__qualname__, name)):
            if (comment := self._comments.get(key)) is not None:
                return comment if isinstance(comment, Comment) else Comment.parse(comment)
        return None

    def comment_for(self, owner_type, field_name, /):
        return self._lookup(owner_type, field_name)

    def class_comment(self, owner_type, /):
        return self._lookup(owner_type, None)


class SourceComments(CommentProvider):
    """
    Comments read from the holder classes' source code (see module documentation).

    Classes whose source is unavailable (interactive sessions, C extensions)
    simply have no comments.
    """

    def __init__(self):
        self._cache = {}

    def _index(self, cls):
        try:
            return self._cache[cls]
        except KeyError:
            pass
        fields, docstring = {}, None
        try:
            source = textwrap.dedent(inspect.getsource(cls))
        except (OSError, TypeError):
            logger.debug("no source available for %s", cls.__qualname__)
        else:
            node = ast.parse(source).body[0]
            lines = source.splitlines()
            docstring = ast.get_docstring(node)
            for index, statement in enumerate(node.body):
                if isinstance(statement, ast.Assign):
                    targets = [target.id for target in statement.targets if isinstance(target, ast.Name)]
                elif isinstance(statement, ast.AnnAssign) and isinstance(statement.target, ast.Name):
                    targets = [statement.target.id]
                else:
                    continue
                if comment := self._trailing(node.body, index) or self._leading(lines, statement.lineno):
                    for target in targets:
                        fields[target] = comment
        self._cache[cls] = (fields, docstring)
        return fields, docstring

    @staticmethod
    def _trailing(body, index):
        # attribute docstring: a bare string literal right after the assignment
        try:
            following = body[index + 1]
        except IndexError:
            return None
        if (
            isinstance(following, ast.Expr) and
            isinstance(following.value, ast.Constant) and
            isinstance(following.value.value, str)
        ):
            return following.value.value
        return None

    @staticmethod
    def _leading(lines, lineno):
        # "#:" comment lines right above the assignment (lineno is 1-based)
        collected = []
        cursor = lineno - 2
        while cursor >= 0 and (line := lines[cursor].strip()).startswith("#:"):
            collected.append(line[2:].strip())
            cursor -= 1
        return "\n".join(reversed(collected)) or None

    def comment_for(self, owner_type, field_name, /):
        for cls in owner_type.__mro__:
            if field_name in vars(cls):
                text = self._index(cls)[0].get(field_name)
                return Comment.parse(text) if text else None
        return None

    def class_comment(self, owner_type, /):
        text = self._index(owner_type)[1]
        return Comment.parse(text) if text else None


__all__ = (
    "Fragment",
    "Comment",
    "CommentProvider",
    "StaticComments",
    "SourceComments",
)
