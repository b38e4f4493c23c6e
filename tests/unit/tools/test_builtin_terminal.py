"""Unit tests for the terminal tool domain."""

import sys
from pathlib import Path

import pytest

from conduit_core.tools.builtin import terminal

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell commands")


class TestExecuteCommand:
    @pytest.mark.asyncio
    async def test_success(self):
        result = await terminal.execute_command({"command": "echo hello"})
        assert result == {"success": True, "stdout": "hello", "stderr": "", "command": "echo hello"}

    @pytest.mark.asyncio
    async def test_non_zero_exit(self):
        result = await terminal.execute_command({"command": "echo oops >&2; exit 3"})
        assert result["success"] is False
        assert result["exit_code"] == 3
        assert result["error"] == "Command failed with exit code 3"
        assert result["stderr"] == "oops"

    @pytest.mark.asyncio
    async def test_cwd(self, tmp_path: Path):
        result = await terminal.execute_command({"command": "pwd", "cwd": str(tmp_path)})
        assert Path(result["stdout"]).resolve() == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_timeout(self):
        result = await terminal.execute_command({"command": "sleep 5", "timeout": 0.2})
        assert result["success"] is False
        assert "timed out" in result["error"]

    @pytest.mark.asyncio
    async def test_missing_command(self):
        result = await terminal.execute_command({})
        assert result["success"] is False

    @pytest.mark.asyncio
    async def test_missing_cwd(self, tmp_path: Path):
        result = await terminal.execute_command(
            {"command": "true", "cwd": str(tmp_path / "missing")}
        )
        assert result["success"] is False
