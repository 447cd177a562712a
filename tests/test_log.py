"""
Tests for ExpenseList.log.log
(covers TankHandler, the Qt bridge and the setup helpers).
"""
import logging
from typing import List

from PySide6.QtCore import QtMsgType

from ExpenseList.log.log import (
    TankHandler,
    get_tank,
    qt_message_handler,
    set_logging_level,
    setup_logging,
)
from tests.base import BaseTestCase


class LogModuleTests(BaseTestCase):
    """
    Each test starts with a fresh root logger configured by
    setup_logging(enable_stream_handler=False).
    """

    def setUp(self) -> None:
        super().setUp()
        self.root_logger = logging.getLogger()

    def test_setup_logging_installs_tank_handler_only(self):
        self.assertEqual(
            [type(h) for h in self.root_logger.handlers],
            [TankHandler],
        )

    def test_setup_logging_with_stream_handler(self):
        setup_logging(enable_stream_handler=True, enable_qt_handler=False)
        self.assertEqual(len(self.root_logger.handlers), 2)
        self.assertIsInstance(get_tank(), TankHandler)

    def test_tank_handler_stores_and_filters(self):
        logging.debug("dbg message")
        logging.error("err message")
        self.assertEqual(len(self.tank.tank), 2)
        errs: List[str] = self.tank.get_logs(logging.ERROR)
        self.assertEqual(len(errs), 1)
        self.assertIn("err message", errs[0])
        self.tank.clear_logs()
        self.assertEqual(len(self.tank.tank), 0)

    def test_tank_uses_log_format(self):
        logging.warning("formatted")
        stored = self.tank.get_logs()[-1]
        self.assertIn("WARNING:", stored)
        self.assertIn("<test_log>", stored)

    def test_set_logging_level_accepts_valid_levels(self):
        set_logging_level(logging.ERROR)
        self.assertEqual(self.root_logger.level, logging.ERROR)
        for h in self.root_logger.handlers:
            self.assertEqual(h.level, logging.ERROR)

        logging.info("hidden")
        self.assertEqual(self.tank.get_logs(), [])

    def test_set_logging_level_rejects_non_int(self):
        with self.assertRaises(ValueError):
            set_logging_level("INFO")  # type: ignore[arg-type]

    def test_set_logging_level_rejects_unknown(self):
        with self.assertRaises(ValueError):
            set_logging_level(1234)

    def test_qt_message_handler_maps_to_logging(self):
        qt_message_handler(QtMsgType.QtInfoMsg, None, "Qt info")
        qt_message_handler(QtMsgType.QtWarningMsg, None, "Qt warn\n")
        qt_message_handler(QtMsgType.QtCriticalMsg, None, "Qt critical")
        msgs = self.tank.get_logs()
        self.assertTrue(any("Qt info" in m for m in msgs))
        self.assertTrue(any("Qt warn" in m for m in msgs))
        self.assertTrue(any("Qt critical" in m for m in self.tank.get_logs(logging.ERROR)))

    def test_qt_message_handler_fatal_exits(self):
        with self.assertRaises(SystemExit):
            qt_message_handler(QtMsgType.QtFatalMsg, None, "fatal")
