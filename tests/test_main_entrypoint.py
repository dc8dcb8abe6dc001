"""Tests for CLI entrypoint wiring."""

from __future__ import annotations

import io
from contextlib import redirect_stdout
import unittest
from unittest.mock import patch

try:
    from skillforge_ui.__main__ import main
except ModuleNotFoundError:
    main = None  # type: ignore[assignment]


@unittest.skipIf(main is None, "textual is not installed")
class MainEntrypointTests(unittest.TestCase):
    """Validate top-level main() behavior."""

    def test_main_ensures_config_and_runs_app(self) -> None:
        with patch("skillforge_ui.__main__.ensure_config_dir") as ensure_mock, patch(
            "skillforge_ui.__main__.load_config", return_value={"chat": {}}
        ), patch("skillforge_ui.__main__.SkillForgeApp") as app_cls_mock:
            main([])
            ensure_mock.assert_called_once()
            app_cls_mock.assert_called_once_with({"chat": {}})
            app_cls_mock.return_value.run.assert_called_once()

    def test_base_url_override(self) -> None:
        with patch("skillforge_ui.__main__.ensure_config_dir"), patch(
            "skillforge_ui.__main__.load_config", return_value={"chat": {}}
        ), patch("skillforge_ui.__main__.SkillForgeApp") as app_cls_mock:
            main(["--base-url", "https://assistant.example.com/"])
            config = app_cls_mock.call_args.args[0]
            self.assertEqual(config["chat"]["base_url"], "https://assistant.example.com")

    def test_version_flag_skips_app(self) -> None:
        buffer = io.StringIO()
        with patch("skillforge_ui.__main__.SkillForgeApp") as app_cls_mock, redirect_stdout(buffer):
            main(["--version"])
        app_cls_mock.assert_not_called()
        self.assertTrue(buffer.getvalue().startswith("skillforge-ui "))


if __name__ == "__main__":
    unittest.main()
