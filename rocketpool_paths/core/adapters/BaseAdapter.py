from __future__ import annotations

from abc import ABC
from typing import Any

from loguru import logger

from rocketpool_paths.core.constants.chains import CHAIN_ID_ETHEREUM


class BaseAdapter(ABC):
    adapter_type: str | None = None

    def __init__(self, name: str, config: dict[str, Any] | None = None):
        self.name = name
        self.config = config or {}
        self.chain_id = int(self.config.get("chain_id", CHAIN_ID_ETHEREUM))
        self.logger = logger.bind(adapter=self.__class__.__name__, chain_id=self.chain_id)

    def _chain_id(self, chain_id: int | None) -> int:
        return self.chain_id if chain_id is None else int(chain_id)
