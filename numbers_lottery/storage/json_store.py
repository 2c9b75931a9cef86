"""Whole-document JSON file I/O with aiofiles.

A missing file and an unparseable file both read as "no data yet". What happens
to an unparseable file is decided by the corruption policy:

  reset   log and start empty (the file is overwritten by the next save)
  backup  move the file aside to ``<name>.corrupt-<timestamp>``, then start empty
  fail    raise StorageCorruptedError

Every other I/O error propagates to the caller.
"""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

import aiofiles
import aiofiles.os
from loguru import logger

from numbers_lottery.errors import StorageCorruptedError

CorruptionPolicy = Literal["reset", "backup", "fail"]


class JsonFileStore:
    """Reads and writes one JSON document per file."""

    def __init__(self, corruption_policy: CorruptionPolicy = "reset"):
        if corruption_policy not in ("reset", "backup", "fail"):
            raise ValueError(f"Unknown corruption policy: {corruption_policy}")
        self.corruption_policy = corruption_policy

    async def load(self, path: Path) -> Any | None:
        """Return the parsed document, or None when there is nothing usable."""
        try:
            async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.debug("load: {} not found, starting empty", path)
            return None
        except UnicodeDecodeError as e:
            return await self.handle_corrupt(path, e)

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            return await self.handle_corrupt(path, e)

        logger.debug("load: read {} ({} bytes)", path, len(raw))
        return document

    async def save(self, path: Path, document: Any) -> None:
        """Replace ``path`` with the pretty-printed document.

        The payload goes to a sibling temp file that is then renamed over ``path``,
        so a concurrent load sees either the old document or the new one.
        """
        path = Path(path)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        payload = json.dumps(document, indent=2, ensure_ascii=False)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp, mode="w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp, path)
        except BaseException:
            if await aiofiles.os.path.exists(tmp):
                await aiofiles.os.remove(tmp)
            raise
        logger.debug("save: wrote {} ({} bytes)", path, len(payload))

    async def handle_corrupt(self, path: Path, reason: Exception) -> None:
        """Apply the corruption policy to an unusable document at ``path``."""
        if self.corruption_policy == "fail":
            logger.error("Stored document {} is corrupted: {}", path, reason)
            raise StorageCorruptedError(str(path)) from reason

        if self.corruption_policy == "backup":
            stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
            backup = Path(path).with_name(f"{Path(path).name}.corrupt-{stamp}")
            await aiofiles.os.rename(path, backup)
            logger.warning(
                "Stored document {} is corrupted ({}), moved to {} and resetting",
                path, reason, backup,
            )
            return None

        logger.warning("Stored document {} is corrupted ({}), resetting", path, reason)
        return None
