import unittest

from src.config import AppConfig


class TestAppConfig(unittest.TestCase):
    def test_defaults_without_environment(self):
        cfg = AppConfig.from_env({})
        self.assertEqual(cfg, AppConfig())
        self.assertEqual(cfg.search_debounce_ms, 500)
        self.assertEqual(cfg.company_search_min_chars, 2)
        self.assertFalse(cfg.api_log_enabled)

    def test_prefixed_variables_override_defaults(self):
        cfg = AppConfig.from_env(
            {
                "HR_CONSOLE_DEBUG": "yes",
                "HR_CONSOLE_LOG_LEVEL": "debug",
                "HR_CONSOLE_API_BASE_URL": "https://hr.example.com/",
                "HR_CONSOLE_API_TIMEOUT_S": "2.5",
                "HR_CONSOLE_SEARCH_DEBOUNCE_MS": "0",
                "HR_CONSOLE_MAX_TOASTS": "2",
                "UNRELATED": "ignored",
            }
        )
        self.assertTrue(cfg.debug)
        self.assertEqual(cfg.log_level, "DEBUG")
        self.assertEqual(cfg.api_base_url, "https://hr.example.com")
        self.assertEqual(cfg.api_timeout_s, 2.5)
        self.assertEqual(cfg.search_debounce_ms, 0)
        self.assertEqual(cfg.max_toasts, 2)

    def test_blank_storage_path_keeps_default(self):
        cfg = AppConfig.from_env({"HR_CONSOLE_STORAGE_PATH": "  "})
        self.assertEqual(cfg.storage_path, AppConfig().storage_path)

    def test_invalid_values_raise_actionable_errors(self):
        cases = {
            "HR_CONSOLE_DEBUG": "maybe",
            "HR_CONSOLE_LOG_LEVEL": "chatty",
            "HR_CONSOLE_API_BASE_URL": "localhost:9400",
            "HR_CONSOLE_API_TIMEOUT_S": "0",
            "HR_CONSOLE_SEARCH_DEBOUNCE_MS": "-1",
            "HR_CONSOLE_COMPANY_SEARCH_LIMIT": "many",
            "HR_CONSOLE_TOAST_DURATION_MS": "100",
        }
        for key, value in cases.items():
            with self.subTest(key=key):
                with self.assertRaises(ValueError) as ctx:
                    AppConfig.from_env({key: value})
                message = str(ctx.exception)
                self.assertTrue(message.startswith("Config / "), message)
                self.assertIn("Fix:", message)


if __name__ == "__main__":
    unittest.main()
