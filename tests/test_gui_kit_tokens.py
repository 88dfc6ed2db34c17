import unittest

from src.gui_kit import tokens
from src.gui_kit.tokens import RecordStatus
from src.gui_kit.tokens import ToastVariant
from src.gui_kit.tokens import UserRole


class TestDesignTokens(unittest.TestCase):
    def test_every_enum_member_has_a_token(self):
        for role in UserRole:
            self.assertTrue(tokens.role_label(role))
            self.assertTrue(tokens.role_color(role).startswith("#"))
        for status in RecordStatus:
            self.assertTrue(tokens.status_color(status).startswith("#"))
        for variant in ToastVariant:
            background, foreground = tokens.toast_colors(variant)
            self.assertNotEqual(background, foreground)

    def test_raw_backend_values_are_accepted(self):
        self.assertEqual(tokens.role_label("provider_hr_staff"), "Provider HR Staff")
        self.assertEqual(tokens.status_color("inactive"), tokens.STATUS_COLORS[RecordStatus.INACTIVE])

    def test_unknown_value_is_an_error_not_a_fallback(self):
        with self.assertRaises(ValueError):
            tokens.role_color("intern")
        with self.assertRaises(ValueError):
            tokens.toast_colors("fatal")

    def test_tables_are_read_only(self):
        with self.assertRaises(TypeError):
            tokens.ROLE_LABELS[UserRole.EMPLOYEE] = "Staff"  # type: ignore[index]

    def test_validation_rejects_incomplete_table(self):
        original = tokens.STATUS_COLORS
        try:
            tokens.STATUS_COLORS = {RecordStatus.ACTIVE: "#16a34a"}
            with self.assertRaises(ValueError) as ctx:
                tokens._validate_token_tables()
            self.assertIn("STATUS_COLORS", str(ctx.exception))
            self.assertIn("inactive", str(ctx.exception))
        finally:
            tokens.STATUS_COLORS = original


if __name__ == "__main__":
    unittest.main()
