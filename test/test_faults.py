"""
Fault tests (codes, messages, options, Rich rendering, host hooks).

Conventions
- Test method names follow CamelCase per project convention.
- Host hooks are patched onto __main__ and removed after each test.
"""
import unittest
from types import MappingProxyType
from unittest import TestCase, mock

from rich.console import Console
from rich.panel import Panel

from commandeer import Command
from commandeer.faults import *


def noop():
    pass


class TestFaults(TestCase):

    def testCodes(self):
        self.assertIs(MissingTargetError().code, FaultCode.MISSING_TARGET)
        self.assertIs(MissingInstanceError().code, FaultCode.MISSING_INSTANCE)
        self.assertIsNone(RegistryError().code)

    def testHierarchy(self):
        self.assertTrue(issubclass(MissingTargetError, TypeError))
        self.assertTrue(issubclass(MissingInstanceError, TypeError))
        self.assertTrue(issubclass(InvocationError, RegistryError))
        self.assertFalse(issubclass(InvocationError, TypeError))

    def testMessageAndOptions(self):
        error = MissingTargetError("target must not be None", hint="pass a function")
        self.assertEqual(str(error), "target must not be None")
        self.assertEqual(error.message, "target must not be None")
        self.assertEqual(error.hint, "pass a function")
        self.assertIsInstance(error.options, MappingProxyType)
        with self.assertRaises(TypeError):
            error.options["hint"] = "other"  # type: ignore[index]

    def testEmptyMessage(self):
        self.assertEqual(str(RegistryError()), "")
        self.assertIsNone(RegistryError().hint)

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            RegistryError(42)

    def testInvocationError(self):
        command = Command(noop, "noop", "tools")
        cause = ValueError("bad value")
        error = InvocationError(command, cause)
        self.assertIs(error.command, command)
        self.assertIs(error.cause, cause)
        self.assertIs(error.__cause__, cause)
        self.assertIs(error.code, FaultCode.INVOCATION_FAILED)
        self.assertEqual(str(error), "command 'tools.noop' failed: ValueError: bad value")

    def testRich(self):
        error = MissingInstanceError("target 'show' requires an instance", hint="pass the owner")
        self.assertIsInstance(error.__rich__(), Panel)

        console = Console(color_system=None, force_terminal=False, width=100)
        with console.capture() as capture:
            console.print(error)
        output = capture.get()
        self.assertIn("21102", output)
        self.assertIn("Missing Instance", output)
        self.assertIn("target 'show' requires an instance", output)
        self.assertIn("pass the owner", output)

    def testNormalizeUsesHostCodes(self):
        self.assertEqual(FaultCode.MISSING_TARGET.normalize(), "21101")
        with mock.patch("__main__.__codes__", {FaultCode.MISSING_TARGET: "E-TARGET"}, create=True):
            self.assertEqual(FaultCode.MISSING_TARGET.normalize(), "E-TARGET")
            self.assertEqual(FaultCode.MISSING_INSTANCE.normalize(), "21102")

    def testRichUsesHostProgramName(self):
        console = Console(color_system=None, force_terminal=False, width=100)
        with mock.patch("__main__.__prog__", "shell", create=True):
            with console.capture() as capture:
                console.print(MissingTargetError("nothing to bind"))
        self.assertIn("shell", capture.get())

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.MISSING_TARGET))
        with mock.patch("__main__.__docs__", {FaultCode.MISSING_TARGET: "no target given"}, create=True):
            self.assertEqual(getdoc(FaultCode.MISSING_TARGET), "no target given")
        with self.assertRaises(TypeError):
            getdoc(21101)


if __name__ == '__main__':
    unittest.main()
