"""Terminal tool domain: shell command execution.

Commands run unsandboxed with the privileges of the host process.
"""

import asyncio
from pathlib import Path
from typing import Any

from conduit_core.tools.registry import ToolRegistry
from conduit_core.tools.types import ToolDescriptor

DOMAIN = "terminal"
DEFAULT_TIMEOUT = 60.0


async def execute_command(params: dict[str, Any]) -> dict[str, Any]:
    """Run a shell command and capture its output.

    Args:
        params: ``command``, optional ``cwd`` and ``timeout`` (seconds)

    Returns:
        ``{success, stdout, stderr, command}``; a non-zero exit adds
        ``error`` and ``exit_code`` with ``success`` False.
    """
    command = params.get("command")
    if not command or not isinstance(command, str):
        return {"success": False, "error": "command is required", "command": command}

    cwd = params.get("cwd")
    timeout = float(params.get("timeout") or DEFAULT_TIMEOUT)

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(Path(cwd).expanduser()) if cwd else None,
        )
    except OSError as e:
        return {"success": False, "error": str(e), "stdout": "", "stderr": "", "command": command}

    try:
        stdout_b, stderr_b = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        return {
            "success": False,
            "error": f"Command timed out after {timeout}s",
            "stdout": "",
            "stderr": "",
            "command": command,
        }

    stdout = stdout_b.decode(errors="replace").strip()
    stderr = stderr_b.decode(errors="replace").strip()

    if process.returncode != 0:
        return {
            "success": False,
            "error": f"Command failed with exit code {process.returncode}",
            "exit_code": process.returncode,
            "stdout": stdout,
            "stderr": stderr,
            "command": command,
        }

    return {"success": True, "stdout": stdout, "stderr": stderr, "command": command}


def register(registry: ToolRegistry) -> None:
    """Register the terminal domain."""
    registry.register(
        DOMAIN,
        "execute_command",
        ToolDescriptor(
            domain=DOMAIN,
            name="execute_command",
            description="Execute a shell command",
            handler=execute_command,
            parameter_schema={
                "type": "object",
                "properties": {
                    "command": {"type": "string", "description": "Command to execute"},
                    "cwd": {"type": "string", "description": "Working directory (optional)"},
                    "timeout": {
                        "type": "number",
                        "description": "Timeout in seconds",
                        "default": DEFAULT_TIMEOUT,
                    },
                },
                "required": ["command"],
            },
        ),
    )
