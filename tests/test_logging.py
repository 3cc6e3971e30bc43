import logging
import sys
import unittest
from unittest import mock

import structlog

from tootmetrics.logging import report_context, setup_logging


class SetupLoggingTests(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)
        structlog.reset_defaults()

    def test_console_handler_writes_to_stderr(self):
        with mock.patch.dict("os.environ", {"LOG_ERROR_FILE": ""}):
            setup_logging("debug")
        root = logging.getLogger()
        streams = [h.stream for h in root.handlers if isinstance(h, logging.StreamHandler)]
        self.assertEqual(streams, [sys.stderr])
        self.assertNotIn(sys.stdout, streams)
        self.assertEqual(root.level, logging.DEBUG)

    def test_report_context_is_unbound_after_block(self):
        with report_context(account_id="a1", metric="followers"):
            self.assertEqual(
                structlog.contextvars.get_contextvars(),
                {"account_id": "a1", "metric": "followers"},
            )
        self.assertEqual(structlog.contextvars.get_contextvars(), {})


if __name__ == "__main__":
    unittest.main()
