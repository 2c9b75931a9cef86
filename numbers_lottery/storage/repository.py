"""Ledger persistence behind a small repository interface."""

from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from numbers_lottery.schemas.lottery import Ledger
from numbers_lottery.storage.json_store import JsonFileStore


class LedgerRepository(ABC):
    """Loads and commits the whole ledger document."""

    store_id: str = ""

    @abstractmethod
    async def load(self) -> Ledger:
        """Return the current ledger, empty if nothing has been stored yet."""
        ...

    @abstractmethod
    async def save(self, ledger: Ledger) -> None:
        """Replace the stored ledger with ``ledger``."""
        ...


class JsonLedgerRepository(LedgerRepository):
    """Ledger kept as one pretty-printed JSON file."""

    def __init__(self, path: Path, store: JsonFileStore | None = None):
        self.path = Path(path)
        self.store = store or JsonFileStore()
        self.store_id = f"ledger:{self.path.resolve()}"

    async def load(self) -> Ledger:
        document = await self.store.load(self.path)
        if document is None:
            return Ledger()
        try:
            return Ledger.model_validate(document)
        except ValidationError as e:
            await self.store.handle_corrupt(self.path, e)
            return Ledger()

    async def save(self, ledger: Ledger) -> None:
        await self.store.save(self.path, ledger.model_dump(mode="json", by_alias=True))
        logger.debug(
            "Ledger committed: {} draws, {} tickets", len(ledger.draws), len(ledger.tickets)
        )
