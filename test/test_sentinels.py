"""
Tests for the resolution sentinels.

This module verifies the guarantees of NotFound and NoMatch:
- Singleton identity (single instance per interpreter process).
- Falsy semantics and string/representation behavior.
- Rich rendering integration.
- Copying, deep copying, pickling, and thread safety properties.
- Finality (concrete types cannot be subclassed).
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from rich.console import Console
from rich.text import Text

from commandeer.sentinels import *


class NotFoundTest(TestCase):
    """
    Test suite for the NotFound singleton.
    """

    def setUp(self) -> None:
        self.sentinel: NotFoundType = NotFoundType()

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.sentinel, NotFoundType())
        self.assertIs(self.sentinel, NotFound)

    def testDistinctFromNoMatch(self) -> None:
        """
        Each concrete sentinel type owns its own instance.
        """
        self.assertIsNot(NotFound, NoMatch)
        self.assertNotEqual(NotFound, NoMatch)

    def testRich(self) -> None:
        """
        __rich__() returns a dim-styled Text with the label.
        """
        self.assertEqual(self.sentinel.__rich__(), Text("NotFound", style="dim"))

    def testRichConsolePrint(self) -> None:
        """
        Console.print(...) renders the label without ANSI when color is disabled.
        """
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(self.sentinel)
        self.assertEqual(capture.get().strip(), "NotFound")

    def testRepr(self) -> None:
        self.assertEqual(repr(self.sentinel), "NotFound")
        self.assertEqual(str(self.sentinel), "NotFound")

    def testFalsely(self) -> None:
        self.assertFalse(bool(self.sentinel))

    def testNotEqualToNoneOrFalse(self) -> None:
        """
        Falsy does not imply equality with other falsy values (None/False).
        """
        self.assertNotEqual(self.sentinel, None)
        self.assertNotEqual(self.sentinel, False)  # noqa: E712

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(self.sentinel), self.sentinel)
        self.assertIs(copy.deepcopy(self.sentinel), self.sentinel)

    def testPickleRoundTrip(self) -> None:
        data: bytes = pickle.dumps(self.sentinel)
        self.assertIs(pickle.loads(data), self.sentinel)

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results: list[NotFoundType] = []
        lock: Lock = Lock()

        def worker():
            instance = NotFoundType()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, self.sentinel)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("NotFoundType", (NotFoundType,), {})


class NoMatchTest(TestCase):
    """
    Test suite for the NoMatch singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(NoMatchType(), NoMatch)

    def testRepr(self) -> None:
        self.assertEqual(repr(NoMatch), "NoMatch")

    def testFalsely(self) -> None:
        self.assertFalse(NoMatch)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("NoMatchType", (NoMatchType,), {})


if __name__ == '__main__':
    unittest.main()
