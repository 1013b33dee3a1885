"""
Renderer module behavioral tests (HTML and comment-format documentation).

Scope
- Validate the exact HTML of flat and grouped listings.
- Validate visibility rules: unpublicized fields and all-unpublicized groups.
- Validate comment precedence, escaping, flattening, and class documentation.
- Validate the comment formats (marker and padding) and single-dash spelling.

Conventions
- Test method names follow CamelCase per project convention.
- Holder classes live at module level (their source is read back).
"""

from __future__ import annotations

import enum
import pathlib
import unittest
from unittest import TestCase

from optsmith import (
    Comment,
    Format,
    Group,
    Option,
    Registry,
    Renderer,
    SourceComments,
    StaticComments,
    UnknownFormatError,
)
from optsmith.renderer import escape, flatten, render


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Listed:
    """Settings of the importer.

    :see: Importer
    """

    #: Maximum number of records.
    max_count = Option("-m", default=10, descr="ignored when a comment exists")
    tags = Option(type=list[str], descr="labels <to> attach")
    output = Option("--out", type=pathlib.Path)
    hidden = Option(default=1, unpublicized=True)
    color = Option(type=Color, default=Color.RED)


class Sectioned:
    _input = Group("input options")
    source = Option(descr="where records come from")

    _debugging = Group("debugging options")
    trace = Option(default=False, unpublicized=True)

    _internal = Group("internal options", unpublicized=True)
    level = Option(default=1, descr="internal level")


class Quoted:
    note = Option(descr="the user's \"name\"")


FLAT = "\n".join((
    "<ul>",
    "  <li><b>-m</b> <b>--max-count=</b><i>int</i>. Maximum number of records. [default 10]</li>",
    "  <li><b>--tags=</b><i>string</i> [+]. labels &lt;to&gt; attach [no default]</li>",
    "  <li><b>--out</b> <b>--output=</b><i>Path</i>.  [no default]</li>",
    "  <li><b>--color=</b><i>Color</i>.  [default RED]</li>",
    "</ul>",
))

GROUPED = "\n".join((
    "<ul>",
    "  <li>input options",
    "    <ul>",
    "      <li><b>--source=</b><i>string</i>. where records come from [no default]</li>",
    "    </ul>",
    "  </li>",
    "  <li>internal options",
    "    <ul>",
    "      <li><b>--level=</b><i>int</i>. internal level [default 1]</li>",
    "    </ul>",
    "  </li>",
    "</ul>",
))


class TestHtml(TestCase):
    """HTML listings."""

    def testFlatListing(self):
        self.assertEqual(render(Registry(Listed()), SourceComments()), FLAT)

    def testFlatListingKeepsDeclarationOrderOfPublicizedFields(self):
        html = Renderer(Registry(Listed()), SourceComments()).html()
        self.assertNotIn("hidden", html)
        self.assertLess(html.index("--max-count"), html.index("--tags"))
        self.assertLess(html.index("--tags"), html.index("--output"))

    def testGroupedListingSkipsAllUnpublicizedGroups(self):
        self.assertEqual(render(Registry(Sectioned())), GROUPED)

    def testGroupingCanBeTurnedOff(self):
        html = render(Registry(Sectioned()), grouping=False)
        self.assertEqual(html.splitlines(), [
            "<ul>",
            "  <li><b>--source=</b><i>string</i>. where records come from [no default]</li>",
            "  <li><b>--level=</b><i>int</i>. internal level [default 1]</li>",
            "</ul>",
        ])

    def testGroupingNeedsGroups(self):
        self.assertEqual(render(Registry(Listed()), SourceComments(), grouping=True), FLAT)

    def testDeclaredDescriptionWithoutProvider(self):
        html = render(Registry(Listed()))
        self.assertIn("<i>int</i>. ignored when a comment exists [default 10]", html)

    def testEmptyCommentFallsBackToDescription(self):
        comments = StaticComments({(Listed, "max_count"): "   "})
        self.assertIn("ignored when a comment exists", render(Registry(Listed()), comments))

    def testCommentMarkupIsFlattened(self):
        comments = StaticComments({(Listed, "tags"): "Labels for :class:`Record`.\n:see: Tagger, Filter"})
        html = render(Registry(Listed()), comments)
        self.assertIn(
            "<i>string</i> [+]. Labels for <code>Record</code>. "
            "See: <code>Tagger</code>, <code>Filter</code>. [no default]",
            html,
        )

    def testEscapeLeavesApostrophes(self):
        self.assertEqual(escape("it's <a href=\"x\">&</a>"), "it's &lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;")

    def testDescriptionWithQuotes(self):
        self.assertIn(
            "<li><b>--note=</b><i>string</i>. the user's &quot;name&quot; [no default]</li>",
            render(Registry(Quoted())),
        )

    def testDefaultIsEscaped(self):
        listed = Listed()
        listed.tags = ["<a>", "b&c"]
        html = render(Registry(listed))
        self.assertIn("[default &lt;a&gt;,b&amp;c]", html)

    def testSingleDashSpelling(self):
        html = render(Registry(Listed(), use_single_dash=True), SourceComments())
        self.assertIn("<b>-m</b> <b>-max-count=</b><i>int</i>", html)
        self.assertIn("<b>--out</b> <b>-output=</b>", html)

    def testClassDocumentation(self):
        lines = render(Registry(Listed()), SourceComments(), classdoc=True).splitlines()
        self.assertEqual(lines[0], "Settings of the importer. See: <code>Importer</code>.")
        self.assertEqual(lines[1], "<p>Command line options: </p>")
        self.assertEqual(lines[2], "<ul>")

    def testClassDocumentationWithoutComment(self):
        lines = render(Registry(Sectioned()), SourceComments(), classdoc=True).splitlines()
        self.assertEqual(lines[0], "<p>Command line options: </p>")

    def testRendererIsReusable(self):
        renderer = Renderer(Registry(Listed()), SourceComments())
        self.assertEqual(renderer.render(), renderer.render())


class TestCommentFormats(TestCase):
    """Javadoc and python comment formats."""

    def testJavadocMarkerAndPadding(self):
        text = render(Registry(Sectioned()), format=Format.JAVADOC, padding=1)
        self.assertEqual(text.splitlines(), [" * " + line for line in GROUPED.splitlines()])

    def testPythonMarker(self):
        text = render(Registry(Sectioned()), format="python")
        self.assertTrue(all(line.startswith("# ") for line in text.splitlines()))
        self.assertEqual(text.splitlines()[0], "# <ul>")

    def testCommentFormatsKeepRawCommentText(self):
        comments = StaticComments({(Listed, "tags"): "Labels for :class:`Record`."})
        text = render(Registry(Listed()), comments, format=Format.JAVADOC)
        self.assertIn("[+]. Labels for :class:`Record`. [no default]", text)

    def testFormatLookup(self):
        self.assertIs(Format.lookup("javadoc"), Format.JAVADOC)
        self.assertIs(Format.lookup(Format.HTML), Format.HTML)
        self.assertIsNone(Format.HTML.marker)
        self.assertEqual(Format.PYTHON.marker, "# ")

    def testUnknownFormat(self):
        with self.assertRaises(UnknownFormatError):
            Format.lookup("markdown")


class TestFlatten(TestCase):
    """Inline HTML of parsed comments."""

    def testCodeAndReferences(self):
        comment = Comment.parse("Run ``a<b`` now.\n:see: x")
        self.assertEqual(flatten(comment), "Run <code>a&lt;b</code> now. See: <code>x</code>.")

    def testTextIsKeptAsMarkup(self):
        self.assertEqual(flatten(Comment.parse("<i>keep</i>")), "<i>keep</i>")


if __name__ == "__main__":
    unittest.main()
