"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import skillforge_ui


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        self.assertTrue(callable(skillforge_ui.load_config))
        self.assertTrue(callable(skillforge_ui.ensure_config_dir))
        self.assertIsNotNone(skillforge_ui.ChatClient)
        self.assertIsNotNone(skillforge_ui.ChatSessionController)
        self.assertIsNotNone(skillforge_ui.NotificationQueue)
        self.assertIsNotNone(skillforge_ui.Page)
        self.assertIsNotNone(skillforge_ui.PreferenceStore)
        self.assertIsNotNone(skillforge_ui.ThemeController)
        self.assertTrue(issubclass(skillforge_ui.ChatRequestError, skillforge_ui.SkillForgeError))
        self.assertTrue(
            issubclass(skillforge_ui.ConfigValidationError, skillforge_ui.SkillForgeError)
        )

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(skillforge_ui, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
