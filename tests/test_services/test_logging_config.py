import json
import logging
import unittest

from pythonjsonlogger.json import JsonFormatter

from core.logging_config import build_logging_config


class LoggingConfigTests(unittest.TestCase):
    def test_text_format_by_default(self):
        cfg = build_logging_config("INFO")
        self.assertEqual(cfg["handlers"]["console"]["formatter"], "standard")
        self.assertEqual(cfg["loggers"][""]["level"], "INFO")

    def test_json_format(self):
        cfg = build_logging_config("DEBUG", "json")
        self.assertEqual(cfg["handlers"]["console"]["formatter"], "json")
        self.assertIs(cfg["formatters"]["json"]["()"], JsonFormatter)

    def test_engine_logger_kept_quiet(self):
        cfg = build_logging_config("DEBUG")
        self.assertEqual(cfg["loggers"]["sqlalchemy.engine"]["level"], "WARNING")

    def test_json_formatter_renders_record(self):
        cfg = build_logging_config("INFO", "json")["formatters"]["json"]
        formatter = JsonFormatter(fmt=cfg["fmt"])
        record = logging.LogRecord("leave.lifecycle", logging.WARNING, __file__, 1, "conflict on %s", (7,), None)
        out = json.loads(formatter.format(record))
        self.assertEqual(out["levelname"], "WARNING")
        self.assertEqual(out["name"], "leave.lifecycle")
        self.assertEqual(out["message"], "conflict on 7")


if __name__ == "__main__":
    unittest.main()
