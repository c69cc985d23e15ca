from __future__ import annotations

import os
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from appshelf.errors import LaunchError
from appshelf.launcher import launch_app, launch_command


def _completed(returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["am"], returncode=returncode, stdout=None, stderr=stderr)


class LaunchCommandTests(unittest.TestCase):
    def test_explicit_activity_uses_component_name(self) -> None:
        self.assertEqual(
            launch_command("com.termux", ".HomeActivity"),
            ["am", "start", "-n", "com.termux/.HomeActivity"],
        )

    def test_package_only_launches_default_activity(self) -> None:
        self.assertEqual(launch_command("com.termux"), ["am", "start", "com.termux"])


class LaunchAppTests(unittest.TestCase):
    def test_clean_run_returns_none(self) -> None:
        with mock.patch("appshelf.launcher.subprocess.run", return_value=_completed()) as run_mock:
            self.assertIsNone(launch_app("com.termux"))

        self.assertEqual(run_mock.call_args.args[0], ["am", "start", "com.termux"])

    def test_error_text_on_stderr_raises_with_message(self) -> None:
        stderr = "Error: Activity class {com.x/.Y} does not exist.\n"
        with mock.patch("appshelf.launcher.subprocess.run", return_value=_completed(stderr=stderr)):
            with self.assertRaises(LaunchError) as ctx:
                launch_app("com.x", ".Y")

        self.assertIn("does not exist", ctx.exception.message)

    def test_nonzero_exit_raises(self) -> None:
        with mock.patch("appshelf.launcher.subprocess.run", return_value=_completed(returncode=1)):
            with self.assertRaises(LaunchError) as ctx:
                launch_app("com.x")

        self.assertIn("status 1", ctx.exception.message)

    def test_missing_binary_raises(self) -> None:
        with mock.patch("appshelf.launcher.subprocess.run", side_effect=FileNotFoundError("am")):
            with self.assertRaises(LaunchError):
                launch_app("com.x")

    def test_timeout_raises(self) -> None:
        with mock.patch(
            "appshelf.launcher.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="am", timeout=15),
        ):
            with self.assertRaises(LaunchError):
                launch_app("com.x")

    def test_undecodable_stderr_still_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            fake_am = Path(tmp) / "am"
            fake_am.write_text("#!/bin/sh\nprintf '\\377\\376 Error' >&2\nexit 0\n", encoding="ascii")
            fake_am.chmod(0o755)
            path = tmp + os.pathsep + os.environ.get("PATH", "")
            with mock.patch.dict(os.environ, {"PATH": path}):
                with self.assertRaises(LaunchError) as ctx:
                    launch_app("com.x")

        self.assertIn("Error", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
