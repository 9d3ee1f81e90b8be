# python
"""
Application module behavioral tests.

Scope
- Validate registration (add, group, find) and its rejections.
- Validate the token classification: long/short options, "--", packed short options,
  unknown names and tokens left uninterpreted.
- Validate end-to-end runs (single values, tuples, repetition) and usage rendering.
- Validate shell mode: usage and fault rendered on standard error, then exit status 1.

Conventions
- Test method names follow CamelCase per project convention.
- Argument vectors always include the program-name slot.
"""

import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from sextant import (
    Application,
    Cursor,
    Flag,
    Group,
    InvalidValueError,
    Multiple,
    OptionRepeatedError,
    Single,
    UnknownOptionError,
    UnsupportedSyntaxError,
)


class TestRegistration(TestCase):
    def testAddKeepsOrderAndReferences(self):
        first, second = Flag("-a"), Flag("-b")
        app = Application("demo").add(first, second)
        self.assertEqual(app.options, (first, second))
        self.assertIn(first, app)
        self.assertEqual(len(app), 2)

    def testAddRejectsNonOptions(self):
        with self.assertRaises(TypeError):
            Application("demo").add("-a")

    def testAddRejectsDuplicates(self):
        option = Flag("-a")
        app = Application("demo").add(option)
        with self.assertRaises(ValueError):
            app.add(option)

    def testAddRejectsNameClashes(self):
        app = Application("demo").add(Flag("-a", "--all"))
        with self.assertRaises(ValueError):
            app.add(Flag("-a"))
        with self.assertRaises(ValueError):
            app.add(Flag("-b", "--all"))

    def testFind(self):
        triple = Single("-t", "--triple")
        factor = Single("-f")
        app = Application("demo").add(triple, factor)
        self.assertIs(app.find(short="t"), triple)
        self.assertIs(app.find(long="triple"), triple)
        self.assertIs(app.find(short="f"), factor)
        self.assertIsNone(app.find(long="f"))
        self.assertIsNone(app.find(short="T"))

    def testFindTakesExactlyOneKey(self):
        app = Application("demo")
        with self.assertRaises(TypeError):
            app.find()
        with self.assertRaises(TypeError):
            app.find(short="a", long="all")

    def testGroupRegistersItsOptions(self):
        registered, fresh = Flag("-a"), Flag("-b")
        app = Application("demo").add(registered)
        group = Group("Modes", registered, fresh)
        app.group(group)
        self.assertEqual(app.options, (registered, fresh))
        self.assertEqual(app.groups, (group,))
        with self.assertRaises(ValueError):
            app.group(group)
        with self.assertRaises(TypeError):
            app.group("Modes")

    def testInvalidName(self):
        with self.assertRaises(ValueError):
            Application(" ")
        with self.assertRaises(TypeError):
            Application(3)


class TestProgram(TestCase):
    def testExplicitName(self):
        self.assertEqual(Application("demo").program, "demo")

    def testMainPrognameHook(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "hooked", create=True):
            self.assertEqual(Application().program, "hooked")

    def testProcessName(self):
        app = Application()
        with mock.patch.object(sys.modules["__main__"], "__prog__", None, create=True):
            self.assertEqual(app.program, "sextant")
            app.parse(["/usr/local/bin/tool"])
            self.assertEqual(app.program, "tool")


class TestParsing(TestCase):
    def setUp(self):
        self.factor = Single("-f", type=int, metavar="N", default=42, help="Integer factor")
        self.triple = Single("-t", "--triple", type=tuple[int, int, int], metavar=("A", "B", "C"), help="Make a tuple with 3 elements")
        self.verbose = Flag("-v", "--verbose", help="Talk more")
        self.app = Application("demo").add(self.factor, self.triple, self.verbose)

    def testShortValue(self):
        self.assertIs(self.app.parse(["prog", "-f", "7"]), self.app)
        self.assertEqual(self.factor.value, 7)
        self.assertEqual(self.factor.occurrences, 1)

    def testDefaultKeptWhenAbsent(self):
        self.app.parse(["prog", "-v"])
        self.assertEqual(self.factor.value, 42)
        self.assertEqual(self.factor.occurrences, 0)
        self.assertTrue(self.verbose.value)

    def testLongAndShortNamesReachTheSameOption(self):
        self.app.parse(["prog", "--verbose", "-v"])
        self.assertEqual(self.verbose.occurrences, 2)

    def testTupleConsumesDashTokens(self):
        self.app.parse(["prog", "-t", "1", "-2", "3", "-v"])
        self.assertEqual(self.triple.value, (1, -2, 3))
        self.assertTrue(self.verbose.value)

    def testTupleDoesNotStopAtOptionNames(self):
        with self.assertRaises(InvalidValueError) as context:
            self.app.parse(["prog", "-t", "42", "-a"])
        self.assertEqual(str(context.exception), "option 'triple': value 'B' is not a valid integer (int): '-a'")
        with self.assertRaises(InvalidValueError) as context:
            self.app.parse(["prog", "--triple", "1", "2", "-v"])
        self.assertEqual(str(context.exception), "option 'triple': value 'C' is not a valid integer (int): '-v'")
        self.assertFalse(self.verbose.value)

    def testRepetition(self):
        with self.assertRaises(OptionRepeatedError) as context:
            self.app.parse(["prog", "-f", "1", "-f", "2"])
        self.assertEqual(str(context.exception), "option 'f' cannot be used more than once")
        self.assertEqual(self.factor.value, 1)

    def testFaultCarriesRunContext(self):
        with self.assertRaises(InvalidValueError) as context:
            self.app.parse(["prog", "-f", "45.67"])
        self.assertEqual(str(context.exception), "option 'f': value 'N' is not a valid integer (int): '45.67'")
        self.assertIs(context.exception.options["tool"], self.app)
        self.assertFalse(context.exception.options["shell"])

    def testOverlongIntegerIsReported(self):
        limit = sys.get_int_max_str_digits()
        sys.set_int_max_str_digits(640)
        self.addCleanup(sys.set_int_max_str_digits, limit)
        token = "9" * 1000
        with self.assertRaises(InvalidValueError) as context:
            self.app.parse(["prog", "-f", token])
        self.assertEqual(str(context.exception), "option 'f': value 'N' is not a valid integer (int): '%s'" % token)
        self.assertEqual(self.factor.value, 42)

    def testUnknownNames(self):
        for token in ("-x", "--nope", "--triple=1"):
            with self.subTest(token=token), self.assertRaises(UnknownOptionError) as context:
                self.app.parse(["prog", token])
            self.assertEqual(str(context.exception), "unknown option name: '%s'" % token)

    def testUnknownNameHint(self):
        with self.assertRaises(UnknownOptionError) as context:
            self.app.parse(["prog", "--tripel"])
        self.assertEqual(context.exception.options["hint"], "did you mean '--triple'?")

    def testNamesAreCaseSensitive(self):
        with self.assertRaises(UnknownOptionError):
            self.app.parse(["prog", "-F", "1"])

    def testPackedShortOptions(self):
        with self.assertRaises(UnsupportedSyntaxError) as context:
            self.app.parse(["prog", "-vf", "1"])
        self.assertEqual(str(context.exception), "packed short options are not supported: '-vf'")
        self.assertFalse(self.verbose.value)

    def testFirstFaultEndsTheRun(self):
        with self.assertRaises(UnknownOptionError):
            self.app.parse(["prog", "-x", "-v"])
        self.assertFalse(self.verbose.value)

    def testTerminator(self):
        self.app.parse(["prog", "-v", "--", "-f", "x", "--"])
        self.assertTrue(self.verbose.value)
        self.assertEqual(self.factor.occurrences, 0)
        self.assertEqual(self.app.unparsed, ("-f", "x", "--"))

    def testNonOptionTokensAreKept(self):
        self.app.parse(["prog", "input", "-f", "3", "-", ""])
        self.assertEqual(self.factor.value, 3)
        self.assertEqual(self.app.unparsed, ("input", "-", ""))

    def testStringVector(self):
        self.app.parse("-f 7 -t 1 2 '3'")
        self.assertEqual(self.factor.value, 7)
        self.assertEqual(self.triple.value, (1, 2, 3))

    def testCursorAndIterableVectors(self):
        cursor = Cursor(["prog", "-f", "5", "rest"])
        self.app.parse(cursor)
        self.assertEqual(self.factor.value, 5)
        self.assertEqual(self.app.unparsed, ("rest",))
        self.app.parse(iter(["prog", "-v"]))
        self.assertTrue(self.verbose.value)

    def testInvalidVectors(self):
        with self.assertRaises(TypeError):
            self.app.parse(["prog", 3])
        with self.assertRaises(TypeError):
            self.app.parse(3)
        with self.assertRaises(ValueError):
            self.app.parse([])

    def testMultipleAccumulates(self):
        include = Multiple("-I", "--include", metavar="DIR")
        self.app.add(include)
        self.app.parse(["prog", "-I", "a", "--include", "-b"])
        self.assertEqual(include.values, ["a", "-b"])


class TestUsage(TestCase):
    def testAlignment(self):
        app = Application("demo").add(
            Single("-f", type=int, metavar="N", help="Integer factor"),
            Single("-t", "--triple", type=tuple[int, int, int], metavar=("A", "B", "C"), help="Make a tuple with 3 elements"),
        )
        self.assertEqual(app.usage(), (
            "demo [options]\n"
            "\n"
            "Options:\n"
            "  -f N                Integer factor\n"
            "  -t,--triple A B C   Make a tuple with 3 elements\n"
        ))

    def testHelpColumnIsShared(self):
        app = Application("demo").add(
            Flag("-v", help="first"),
            Multiple("--include-directory", metavar="DIR", help="second"),
        )
        lines = app.usage().splitlines()
        self.assertEqual(lines[3].index("first"), lines[4].index("second"))
        self.assertEqual(lines[4].index("second"), len("  --include-directory DIR") + 3)

    def testGroupSections(self):
        verbose = Flag("-v", "--verbose", help="Talk more")
        include = Multiple("-I", "--include", metavar="DIR", help="Add a search directory")
        app = Application("demo").add(verbose)
        app.group(Group("Search", include))
        self.assertEqual(app.usage(), (
            "demo [options]\n"
            "\n"
            "Options:\n"
            "  -v,--verbose       Talk more\n"
            "\n"
            "Search:\n"
            "  -I,--include DIR   Add a search directory\n"
        ))

    def testWriteUsageToSinks(self):
        app = Application("demo").add(Flag("-v", help="Talk more"))
        stream = io.StringIO()
        app.write_usage(stream)
        self.assertEqual(stream.getvalue(), app.usage())
        console = Console(file=(captured := io.StringIO()), width=20)
        app.write_usage(console)
        self.assertEqual(captured.getvalue(), app.usage())
        with self.assertRaises(TypeError):
            app.write_usage(object())

    def testRich(self):
        app = Application("demo").add(Flag("-v"))
        self.assertEqual(app.__rich__().plain, app.usage())


class TestShell(TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        patcher = mock.patch("sextant.faults.console", Console(file=self.stream, width=200))
        patcher.start()
        self.addCleanup(patcher.stop)

    def testFaultIsRenderedAndExits(self):
        app = Application("demo", shell=True, colorful=False).add(Flag("-v", help="Talk more"))
        with self.assertRaises(SystemExit) as context:
            app.parse(["prog", "-x"])
        self.assertEqual(context.exception.code, 1)
        output = self.stream.getvalue()
        self.assertTrue(output.startswith("demo [options]\n"))
        self.assertIn("unknown option name: '-x'", output)
        self.assertIn("11112", output)

    def testFancyPanel(self):
        app = Application("demo", shell=True, fancy=True).add(Single("-f", type=int))
        with self.assertRaises(SystemExit):
            app.parse(["prog", "-f", "x"])
        self.assertIn("option 'f': value 'INT' is not a valid integer (int): 'x'", self.stream.getvalue())

    def testSuccessfulRunPrintsNothing(self):
        app = Application("demo", shell=True).add(Flag("-v"))
        app.parse(["prog", "-v"])
        self.assertEqual(self.stream.getvalue(), "")


if __name__ == "__main__":
    unittest.main()
