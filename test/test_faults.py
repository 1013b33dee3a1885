"""
Faults and utilities behavioral tests.

Scope
- Validate fault options, attribute access, replacement, and triggering.
- Validate rich rendering of errors and warnings.
- Validate the small helpers (coalesce, ordinal, mirror, mglob) and logging setup.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import logging
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console

from optsmith import (
    DeclarationError,
    FaultCode,
    MissingSentinelWarning,
    OptionsException,
    ParseError,
    UnknownOptionError,
    trigger,
)
from optsmith.log import ENVIRONMENT_VARIABLE, resolve_level, setup_logging
from optsmith.utils import Unset, coalesce, mglob, mirror, ordinal


def text(renderable):
    console = Console(file=io.StringIO(), width=200, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaults(TestCase):
    """Error and warning objects."""

    def testOptionsAreAttributes(self):
        fault = UnknownOptionError("unknown option '--x' at first position", token="--x", index=1)
        self.assertEqual(fault.token, "--x")
        self.assertEqual(fault.index, 1)
        with self.assertRaises(AttributeError):
            fault.missing

    def testOptionsAreReadOnly(self):
        fault = OptionsException("message", code=FaultCode.UNKNOWN_OPTION)
        with self.assertRaises(TypeError):
            fault.options["code"] = 0

    def testTaxonomy(self):
        self.assertTrue(issubclass(DeclarationError, TypeError))
        self.assertTrue(issubclass(ParseError, ValueError))
        self.assertTrue(issubclass(UnknownOptionError, OptionsException))

    def testReplaceMergesOptions(self):
        fault = ParseError("message", token="a")
        replaced = fault.__replace__(index=3)
        self.assertIsInstance(replaced, ParseError)
        self.assertEqual((replaced.token, replaced.index), ("a", 3))
        self.assertNotIn("index", fault.options)

    def testTriggerRaisesByDefault(self):
        with self.assertRaises(ParseError) as context:
            trigger(ParseError("message"), hint="fix it")
        self.assertEqual(context.exception.hint, "fix it")

    def testTriggerInShellExits(self):
        with mock.patch("optsmith.faults.console", Console(file=io.StringIO())):
            with self.assertRaises(SystemExit) as context:
                trigger(ParseError("message"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testTriggerInShellDeferredReturns(self):
        stream = io.StringIO()
        with mock.patch("optsmith.faults.console", Console(file=stream, width=200)):
            trigger(ParseError("bad things", code=FaultCode.MISSING_VALUE), shell=True, deferred=True)
        self.assertIn("bad things", stream.getvalue())

    def testWarningsAreWarned(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            trigger(MissingSentinelWarning("no sentinel"))
        self.assertEqual(len(caught), 1)
        self.assertIsInstance(caught[0].message, MissingSentinelWarning)

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testRendering(self):
        fault = UnknownOptionError(
            "unknown option '--x' at first position",
            code=FaultCode.UNKNOWN_OPTION,
            title="unknown option",
            hint="did you mean '--y'?",
            prog="tool",
        )
        rendered = text(fault)
        self.assertIn("tool", rendered)
        self.assertIn("11201", rendered)
        self.assertIn("Unknown Option", rendered)
        self.assertIn("did you mean '--y'?", rendered)

    def testFancyRendering(self):
        rendered = text(ParseError("boxed", fancy=True, colorful=False))
        self.assertIn("boxed", rendered)

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.DUPLICATED_NAME, 11101)
        self.assertEqual(FaultCode.UNKNOWN_OPTION, 11201)
        self.assertEqual(FaultCode.CONFLICTING_FLAGS, 11301)
        self.assertEqual(FaultCode.SENTINEL_NOT_FOUND, 12101)
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "11201")


class TestUtils(TestCase):
    """Helpers shared across modules."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, 1), 1)
        self.assertIsNone(coalesce(None, 1))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testUnsetIsFalseyAndUnique(self):
        self.assertFalse(Unset)
        self.assertIs(type(Unset)(), Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(112), "112th")

    def testMirrorCopiesContainers(self):
        class Box:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        box = Box()
        self.assertEqual(box.items, (1, 2))
        self.assertIsNot(box.items, box._items)

    def testMglobWithoutWildcards(self):
        self.assertEqual(mglob("json"), ["json"])

    def testMglobExpandsPackages(self):
        self.assertIn("optsmith.registry", mglob("optsmith.*"))
        self.assertNotIn("optsmith", mglob("optsmith.*"))

    def testMglobRejectsWildcardPrefix(self):
        with self.assertRaises(ValueError):
            mglob("*.settings")


class TestLogging(TestCase):
    """Rich logging setup."""

    def tearDown(self):
        logger = logging.getLogger("optsmith")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    def testLevelResolution(self):
        self.assertEqual(resolve_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_level(logging.INFO), logging.INFO)
        with mock.patch.dict("os.environ", {ENVIRONMENT_VARIABLE: "error"}):
            self.assertEqual(resolve_level(), logging.ERROR)
        with self.assertRaises(ValueError):
            resolve_level("loud")

    def testSetupInstallsOneHandler(self):
        setup_logging("DEBUG")
        logger = setup_logging("INFO")
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.INFO)
        self.assertFalse(logger.propagate)


if __name__ == "__main__":
    unittest.main()
