"""Tool for persisting the review as a markdown file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)


def resolve_markdown_path(filename: str, directory: str | None = None) -> Path:
    """Build the target path, defaulting to the working directory and enforcing ``.md``."""
    base_dir = Path.cwd() if directory in {None, "", "."} else Path(directory)
    if not filename.endswith(".md"):
        filename = f"{filename}.md"
    return base_dir / filename


async def write_markdown_file(
    content: str, filename: str, directory: str | None = None
) -> dict[str, Any]:
    """Write ``content`` as UTF-8, overwriting any existing file.

    Filesystem failures, including paths the OS rejects outright, are reported
    in the returned data rather than raised.
    """
    file_path = resolve_markdown_path(filename, directory)
    try:
        await aiofiles.os.makedirs(file_path.parent, exist_ok=True)
        async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
            await f.write(content)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to write markdown file {file_path!r}: {e}")
        return {
            "success": False,
            "error": str(e),
            "message": "Failed to write markdown file",
        }

    logger.info(f"Wrote {len(content)} characters to {file_path}")
    return {
        "success": True,
        "file_path": str(file_path),
        "message": f"Successfully wrote markdown file to {file_path}",
    }
