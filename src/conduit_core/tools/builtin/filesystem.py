"""Filesystem tool domain.

Every handler returns a result dict and reports OS errors as
``{"success": False, "error": ...}``. Paths support ``~`` expansion.
Handlers are plain functions; registered descriptors run them through
``asyncio.to_thread``.
"""

import asyncio
import functools
import heapq
import shutil
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from conduit_core.tools.registry import ToolRegistry
from conduit_core.tools.types import ToolDescriptor, ToolHandler

DOMAIN = "filesystem"
DEFAULT_MAX_RESULTS = 100


def expand_path(path: str) -> Path:
    """Expand a leading ``~`` to the user's home directory."""
    return Path(path).expanduser()


def _timestamp(epoch: float) -> str:
    return datetime.fromtimestamp(epoch, UTC).isoformat()


def read_file(params: dict[str, Any]) -> dict[str, Any]:
    try:
        content = expand_path(params["path"]).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "content": content}


def write_file(params: dict[str, Any]) -> dict[str, Any]:
    try:
        expand_path(params["path"]).write_text(params["content"], encoding="utf-8")
    except (OSError, KeyError, TypeError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "message": "File written successfully"}


def list_directory(params: dict[str, Any]) -> dict[str, Any]:
    """List immediate children as {name, type} entries."""
    try:
        directory = expand_path(params["path"])
        contents = [
            {"name": item.name, "type": "directory" if item.is_dir() else "file"}
            for item in sorted(directory.iterdir())
        ]
    except (OSError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "contents": contents}


def search_files(params: dict[str, Any]) -> dict[str, Any]:
    """Glob for files under a directory.

    Results beyond ``max_results`` are dropped and reported via
    ``truncated`` and ``message``.
    """
    try:
        directory = expand_path(params["directory"])
        pattern = params["pattern"]
        recursive = params.get("recursive", True)
        max_results = max(1, int(params.get("max_results", DEFAULT_MAX_RESULTS)))

        if not directory.is_dir():
            return {"success": False, "error": f"Not a directory: {directory}"}

        matches = directory.rglob(pattern) if recursive else directory.glob(pattern)
        total_count = 0

        def counted() -> Iterator[str]:
            nonlocal total_count
            for match in matches:
                total_count += 1
                yield str(match)

        # Only the first max_results paths (in sorted order) are held in memory
        files = heapq.nsmallest(max_results, counted())
    except (OSError, KeyError, ValueError) as e:
        return {"success": False, "error": str(e)}

    result: dict[str, Any] = {
        "success": True,
        "files": files,
        "total_count": total_count,
        "truncated": total_count > max_results,
    }
    if total_count > max_results:
        result["message"] = (
            f"Showing first {max_results} of {total_count} results. "
            "Use more specific patterns to see all."
        )
    return result


def get_file_stats(params: dict[str, Any]) -> dict[str, Any]:
    try:
        path = expand_path(params["path"])
        stats = path.stat()
    except (OSError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {
        "success": True,
        "stats": {
            "size": stats.st_size,
            "is_file": path.is_file(),
            "is_directory": path.is_dir(),
            "created": _timestamp(stats.st_ctime),
            "modified": _timestamp(stats.st_mtime),
            "accessed": _timestamp(stats.st_atime),
        },
    }


def create_directory(params: dict[str, Any]) -> dict[str, Any]:
    try:
        path = expand_path(params["path"])
        recursive = params.get("recursive", True)
        path.mkdir(parents=recursive, exist_ok=recursive)
    except (OSError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "message": f"Directory created: {path}"}


def delete_file(params: dict[str, Any]) -> dict[str, Any]:
    """Delete a file, or a directory tree."""
    try:
        path = expand_path(params["path"])
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except (OSError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "message": f"Deleted: {path}"}


def copy_file(params: dict[str, Any]) -> dict[str, Any]:
    try:
        source = expand_path(params["source"])
        destination = expand_path(params["destination"])
        shutil.copyfile(source, destination)
    except (OSError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "message": f"Copied {source} to {destination}"}


def move_file(params: dict[str, Any]) -> dict[str, Any]:
    try:
        source = expand_path(params["source"])
        destination = expand_path(params["destination"])
        shutil.move(source, destination)
    except (OSError, KeyError) as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "message": f"Moved {source} to {destination}"}


def _string(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


TOOLS: list[tuple[str, str, ToolHandler, dict[str, Any]]] = [
    (
        "read_file",
        "Read content from a file",
        read_file,
        {
            "type": "object",
            "properties": {"path": _string("File path to read")},
            "required": ["path"],
        },
    ),
    (
        "write_file",
        "Write content to a file",
        write_file,
        {
            "type": "object",
            "properties": {
                "path": _string("File path to write"),
                "content": _string("Content to write"),
            },
            "required": ["path", "content"],
        },
    ),
    (
        "list_directory",
        "List contents of a directory",
        list_directory,
        {
            "type": "object",
            "properties": {"path": _string("Directory path to list")},
            "required": ["path"],
        },
    ),
    (
        "search_files",
        "Search for files in a directory by glob pattern",
        search_files,
        {
            "type": "object",
            "properties": {
                "directory": _string("Directory to search in"),
                "pattern": _string("Glob pattern to match, e.g. *.py"),
                "recursive": {"type": "boolean", "default": True},
                "max_results": {"type": "integer", "default": DEFAULT_MAX_RESULTS},
            },
            "required": ["directory", "pattern"],
        },
    ),
    (
        "get_file_stats",
        "Get file or directory statistics",
        get_file_stats,
        {
            "type": "object",
            "properties": {"path": _string("File or directory path")},
            "required": ["path"],
        },
    ),
    (
        "create_directory",
        "Create a new directory",
        create_directory,
        {
            "type": "object",
            "properties": {
                "path": _string("Directory path to create"),
                "recursive": {"type": "boolean", "default": True},
            },
            "required": ["path"],
        },
    ),
    (
        "delete_file",
        "Delete a file or directory",
        delete_file,
        {
            "type": "object",
            "properties": {"path": _string("Path to delete")},
            "required": ["path"],
        },
    ),
    (
        "copy_file",
        "Copy a file",
        copy_file,
        {
            "type": "object",
            "properties": {
                "source": _string("Source file path"),
                "destination": _string("Destination file path"),
            },
            "required": ["source", "destination"],
        },
    ),
    (
        "move_file",
        "Move a file to a new location",
        move_file,
        {
            "type": "object",
            "properties": {
                "source": _string("Source file path"),
                "destination": _string("Destination file path"),
            },
            "required": ["source", "destination"],
        },
    ),
]


def _in_thread(handler: ToolHandler) -> ToolHandler:
    @functools.wraps(handler)
    async def run(params: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(handler, params)

    return run


def register(registry: ToolRegistry) -> None:
    """Register the filesystem domain."""
    for name, description, handler, schema in TOOLS:
        registry.register(
            DOMAIN,
            name,
            ToolDescriptor(
                domain=DOMAIN,
                name=name,
                description=description,
                handler=_in_thread(handler),
                parameter_schema=schema,
            ),
        )
