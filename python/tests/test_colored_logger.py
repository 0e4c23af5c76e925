"""
Colored logger tests: level resolution and the TRACE helper.
"""

import logging
import unittest

from colored_logger import TRACE_LEVEL, _resolve_level, get_colored_logger
from .test_utils import BaseTestCase


class TestLevelResolution(BaseTestCase):
    """Levels can be given as numbers or names."""

    def test_names_and_numbers(self):
        cases = [
            (logging.DEBUG, logging.DEBUG),
            ("debug", logging.DEBUG),
            (" WARNING ", logging.WARNING),
            ("trace", TRACE_LEVEL),
            ("no-such-level", logging.INFO),
        ]

        for level, expected in cases:
            with self.subTest(level=level):
                self.assertEqual(_resolve_level(level), expected)

    def test_only_trace_is_registered(self):
        self.assertEqual(logging.getLevelName(TRACE_LEVEL), "TRACE")
        for name in ["SUCCESS", "NOTICE"]:
            with self.subTest(name=name):
                self.assertEqual(_resolve_level(name), logging.INFO)


class TestEnhancedLogger(BaseTestCase):
    """The wrapper adds trace() and defers everything else."""

    def test_trace_logs_at_trace_level(self):
        logging.disable(logging.NOTSET)
        logger = get_colored_logger("post_query.tests.trace")

        with self.assertLogs("post_query.tests.trace", level=TRACE_LEVEL) as captured:
            logger.trace("step %d", 1)

        self.assertEqual(captured.records[0].levelno, TRACE_LEVEL)
        self.assertEqual(captured.records[0].getMessage(), "step 1")

    def test_standard_methods_pass_through(self):
        logger = get_colored_logger("post_query.tests.passthrough")

        self.assertEqual(logger.name, "post_query.tests.passthrough")
        self.assertFalse(hasattr(logger, "success"))
        self.assertFalse(hasattr(logger, "notice"))


if __name__ == "__main__":
    unittest.main()
