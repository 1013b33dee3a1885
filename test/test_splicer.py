"""
Splicer module behavioral tests (sentinel-delimited replacement).

Scope
- Validate replacement between sentinels with every other line byte-identical.
- Validate line-ending preservation, trimmed matching, first-start-only.
- Validate missing sentinels: lenient (warning) and strict (SpliceError).
- Validate callable blocks and comment-format sentinels.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optsmith import FaultCode, Format, SpliceError, Splicer, splice
from optsmith.splicer import END, START

DOCUMENT = "\n".join((
    "<html>",
    "intro",
    START,
    "stale line 1",
    "stale line 2",
    END,
    "outro",
    "</html>",
    "",
))


class TestSplice(TestCase):
    """Replacement between sentinels."""

    def testReplacesRegion(self):
        self.assertEqual(splice(DOCUMENT, "<ul>\n</ul>"), "\n".join((
            "<html>",
            "intro",
            START,
            "<ul>",
            "</ul>",
            END,
            "outro",
            "</html>",
            "",
        )))

    def testOtherLinesAreIdentical(self):
        before = DOCUMENT.splitlines()
        after = splice(DOCUMENT, "fresh").splitlines()
        self.assertEqual(after[:3], before[:3])
        self.assertEqual(after[-3:], before[-3:])

    def testSplicingIsRepeatable(self):
        once = splice(DOCUMENT, "fresh")
        self.assertEqual(splice(once, "fresh"), once)

    def testLineEndingsArePreserved(self):
        document = "a\r\n" + START + "\r\nold\r\n" + END + "\r\nb\r\n"
        self.assertEqual(splice(document, "x\ny"), "a\r\n" + START + "\r\nx\r\ny\r\n" + END + "\r\nb\r\n")

    def testSentinelsAreTrimmed(self):
        document = "  " + START + "  \nold\n\t" + END + "\nafter\n"
        self.assertEqual(splice(document, "new"), "  " + START + "  \nnew\n\t" + END + "\nafter\n")

    def testOnlyFirstStartIsHonored(self):
        document = "\n".join((START, "one", END, START, "two", END, ""))
        self.assertEqual(splice(document, "new"), "\n".join((START, "new", END, START, "two", END, "")))

    def testDocumentWithoutTrailingNewline(self):
        self.assertEqual(splice(START + "\nold\n" + END, "new"), START + "\nnew\n" + END)

    def testEmptyBlock(self):
        self.assertEqual(splice(DOCUMENT, "").splitlines()[2:4], [START, END])

    def testCallableBlockReceivesStartLine(self):
        received = []

        def block(line):
            received.append(line)
            return "generated"

        result = splice("x\n   " + START + "\n" + END + "\n", block)
        self.assertEqual(received, ["   " + START])
        self.assertEqual(result, "x\n   " + START + "\ngenerated\n" + END + "\n")

    def testCustomSentinels(self):
        self.assertEqual(splice("[[\nold\n]]\n", "new", start="[[", end="]]"), "[[\nnew\n]]\n")


class TestMissingSentinels(TestCase):
    """Lenient and strict handling of missing sentinel lines."""

    def testMissingStartLeavesDocumentUnchanged(self):
        document = "no sentinels\nhere\n"
        with self.assertLogs("optsmith.splicer", "WARNING"):
            self.assertEqual(splice(document, "block"), document)

    def testMissingEndKeepsFollowingLines(self):
        document = "a\n" + START + "\nb\nc\n"
        with self.assertLogs("optsmith.splicer", "WARNING"):
            result = splice(document, "new")
        self.assertEqual(result, "a\n" + START + "\nnew\nb\nc\n")

    def testStrictMissingStart(self):
        with self.assertRaises(SpliceError) as context:
            splice("nothing\n", "block", strict=True)
        self.assertEqual(context.exception.code, FaultCode.MISSING_SENTINEL)

    def testStrictMissingEnd(self):
        with self.assertRaises(SpliceError) as context:
            splice(START + "\nrest\n", "block", strict=True)
        self.assertEqual(context.exception.sentinel, END)

    def testLocate(self):
        splicer = Splicer()
        self.assertEqual(splicer.locate(DOCUMENT), (2, 5))
        self.assertEqual(splicer.locate("nothing"), (None, None))
        self.assertEqual(splicer.locate(START), (0, None))


class TestSplicer(TestCase):
    """Splicer construction."""

    def testCommentFormatSentinels(self):
        self.assertEqual(Splicer.for_format(Format.JAVADOC).start, "* " + START)
        self.assertEqual(Splicer.for_format("python").end, "# " + END)
        self.assertEqual(Splicer.for_format("html").start, START)

    def testCommentFormatSplice(self):
        document = "/**\n * intro\n * " + START + "\n * old\n * " + END + "\n */\n"
        result = Splicer.for_format(Format.JAVADOC).splice(document, " * new")
        self.assertEqual(result, "/**\n * intro\n * " + START + "\n * new\n * " + END + "\n */\n")

    def testBlankSentinelsRejected(self):
        with self.assertRaises(ValueError):
            Splicer(" ", END)

    def testIdenticalSentinelsRejected(self):
        with self.assertRaises(ValueError):
            Splicer(START, START)


if __name__ == "__main__":
    unittest.main()
