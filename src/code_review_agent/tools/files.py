"""Tool for reading source files into the conversation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

DEFAULT_MAX_READ_BYTES = 10 * 1024 * 1024


async def read_file(
    file_path: str, max_bytes: int = DEFAULT_MAX_READ_BYTES
) -> dict[str, Any]:
    """Read a UTF-8 text file.

    Returns the content and its line count, or ``{"success": False, "error"}``
    when the path is missing, is a directory, is unreadable, is too large, or
    is not valid UTF-8 text.
    """
    path = Path(file_path)
    if not await aiofiles.os.path.exists(path):
        return {"success": False, "error": f"File not found: {file_path}"}
    if await aiofiles.os.path.isdir(path):
        return {"success": False, "error": f"Path is a directory: {file_path}"}

    try:
        size = (await aiofiles.os.stat(path)).st_size
        if size > max_bytes:
            return {
                "success": False,
                "error": f"File too large: {size} bytes (limit {max_bytes})",
            }
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
    except PermissionError:
        return {"success": False, "error": f"Permission denied: {file_path}"}
    except UnicodeDecodeError:
        return {
            "success": False,
            "error": f"File is not valid UTF-8 text: {file_path}",
        }
    except OSError as e:
        logger.warning(f"Failed to read {file_path}: {e}")
        return {"success": False, "error": f"Could not read {file_path}: {e}"}

    if "\x00" in content:
        return {"success": False, "error": f"File appears to be binary: {file_path}"}

    logger.info(f"Read {len(content)} characters from {file_path}")
    return {
        "success": True,
        "file_path": str(path),
        "content": content,
        "total_lines": len(content.splitlines()),
    }
