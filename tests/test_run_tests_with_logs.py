import tempfile
import unittest
from datetime import datetime
from pathlib import Path

import run_tests_with_logs as runner


class TestRunTestsWithLogs(unittest.TestCase):
    def test_failure_log_path_is_timestamped(self):
        path = runner._failure_log_path(runner.DEFAULT_LOG_DIR, datetime(2026, 10, 19, 9, 5, 7))
        self.assertEqual(
            path.name,
            "test_failures_20261019_090507.txt",
            "Failure log filename format mismatch. "
            "Fix: use test_failures_YYYYMMDD_HHMMSS.txt naming.",
        )

    def test_write_failure_report_creates_parent_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp) / "nested" / "testlogs"
            path = runner._write_failure_report(log_dir, "report body", datetime(2026, 10, 19, 9, 5, 7))
            self.assertTrue(path.exists())
            self.assertEqual(path.read_text(encoding="utf-8"), "report body")

    def test_build_failure_report_lists_failed_tests_and_skips(self):
        result = unittest.TestResult()
        result.testsRun = 4
        result.failures = [("test_autocomplete_enter", "traceback")]
        result.errors = [("test_session_hydrate", "traceback")]
        result.skipped = [("test_view", "Tk display unavailable")]

        report = runner._build_failure_report(result, "unittest output", datetime(2026, 10, 19, 9, 5, 7))
        self.assertIn("Timestamp: 2026-10-19T09:05:07", report)
        self.assertIn("Summary: ran=4, failures=1, errors=1, skipped=1", report)
        self.assertIn("  - test_autocomplete_enter", report)
        self.assertIn("  - test_session_hydrate", report)
        self.assertIn("Fix hint:", report)
        self.assertIn("unittest output", report)

    def test_arguments_default_to_full_suite(self):
        args = runner._parse_args([])
        self.assertEqual(args.pattern, "test_*.py")
        self.assertEqual(Path(args.log_dir), runner.DEFAULT_LOG_DIR)
        self.assertEqual(args.log_level, "WARNING")

        args = runner._parse_args(["--pattern", "test_gui_kit_*.py", "--log-level", "DEBUG"])
        self.assertEqual(args.pattern, "test_gui_kit_*.py")
        self.assertEqual(args.log_level, "DEBUG")


if __name__ == "__main__":
    unittest.main()
