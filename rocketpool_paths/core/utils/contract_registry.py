"""RocketStorage-backed contract lookup, ABI providers and bytecode sources.

Every Rocket Pool network contract is registered in RocketStorage under
``keccak256("contract.address" ++ name)``; its ABI is stored as a
base64-encoded, zlib-compressed JSON string under
``keccak256("contract.abi" ++ name)``.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import zlib
from typing import Any, Protocol

import aiohttp
from eth_utils import keccak, to_checksum_address
from loguru import logger
from web3 import AsyncWeb3

from rocketpool_paths.core.constants.base import ZERO_ADDRESS
from rocketpool_paths.core.constants.rocketpool_abi import (
    ROCKET_MINIPOOL_ABI,
    ROCKET_MINIPOOL_MANAGER_ABI,
    ROCKET_STORAGE_ABI,
)
from rocketpool_paths.core.constants.rocketpool_contracts import (
    CONTRACT_ABI_KEY_PREFIX,
    CONTRACT_ADDRESS_KEY_PREFIX,
    ROCKET_MINIPOOL,
    ROCKET_MINIPOOL_MANAGER,
    ROCKET_STORAGE,
)
from rocketpool_paths.core.errors import BytecodeUnavailableError, SchemaUnavailableError
from rocketpool_paths.core.utils.bytes import hex_to_bytes
from rocketpool_paths.core.utils.retry import retry_async

_RETRYABLE_HTTP_STATUS = {429, 502, 503, 504}


class AbiProvider(Protocol):
    async def get_abi(self, name: str) -> list[dict[str, Any]]: ...


class BytecodeSource(Protocol):
    async def get_minipool_bytecode(self) -> bytes: ...


def contract_storage_key(prefix: bytes, name: str) -> bytes:
    return keccak(prefix + name.encode("utf-8"))


def decode_abi(encoded: str, *, name: str = "") -> list[dict[str, Any]]:
    try:
        raw = zlib.decompress(base64.b64decode(encoded, validate=True))
        abi = json.loads(raw)
    except (binascii.Error, zlib.error, ValueError) as exc:
        raise SchemaUnavailableError(name, f"Could not decode {name} ABI: {exc}") from exc
    if not isinstance(abi, list):
        raise SchemaUnavailableError(name, f"Decoded {name} ABI is not a list")
    return abi


def encode_abi(abi: list[dict[str, Any]]) -> str:
    return base64.b64encode(zlib.compress(json.dumps(abi).encode("utf-8"))).decode()


class StaticAbiProvider:
    def __init__(self, abis: dict[str, list[dict[str, Any]]] | None = None):
        self.abis = abis if abis is not None else {
            ROCKET_MINIPOOL: ROCKET_MINIPOOL_ABI,
            ROCKET_MINIPOOL_MANAGER: ROCKET_MINIPOOL_MANAGER_ABI,
            ROCKET_STORAGE: ROCKET_STORAGE_ABI,
        }

    async def get_abi(self, name: str) -> list[dict[str, Any]]:
        abi = self.abis.get(name)
        if not abi:
            raise SchemaUnavailableError(name)
        return abi


class RocketPoolContracts:
    """Resolves and memoises Rocket Pool contract handles by name.

    Each name has its own lock so concurrent callers share a single lookup.
    """

    def __init__(self, web3: AsyncWeb3, storage_address: str):
        self.web3 = web3
        self.storage_address = to_checksum_address(storage_address)
        self.storage = web3.eth.contract(
            address=self.storage_address, abi=ROCKET_STORAGE_ABI
        )
        self._contracts: dict[str, Any] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_address(self, name: str) -> str:
        key = contract_storage_key(CONTRACT_ADDRESS_KEY_PREFIX, name)
        address = await self.storage.functions.getAddress(key).call()
        if not address or to_checksum_address(address) == ZERO_ADDRESS:
            raise ValueError(f"Contract {name} not found in RocketStorage")
        return to_checksum_address(address)

    async def get_abi(self, name: str) -> list[dict[str, Any]]:
        key = contract_storage_key(CONTRACT_ABI_KEY_PREFIX, name)
        try:
            encoded = await self.storage.functions.getString(key).call()
        except Exception as exc:
            raise SchemaUnavailableError(name, f"Could not load {name} ABI: {exc}") from exc
        if not encoded:
            raise SchemaUnavailableError(name)
        return decode_abi(encoded, name=name)

    async def get_contract(self, name: str, abi: list[dict[str, Any]] | None = None):
        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            contract = self._contracts.get(name)
            if contract is not None:
                return contract
            logger.debug(f"Resolving Rocket Pool contract {name}")
            address = await self.get_address(name)
            if abi is None:
                abi = await self.get_abi(name)
            contract = self.web3.eth.contract(address=address, abi=abi)
            self._contracts[name] = contract
            return contract

    def clear(self) -> None:
        self._contracts.clear()


class StaticBytecodeSource:
    def __init__(self, bytecode: bytes | str):
        self.bytecode = hex_to_bytes(bytecode)

    async def get_minipool_bytecode(self) -> bytes:
        if not self.bytecode:
            raise BytecodeUnavailableError("Static minipool bytecode is empty")
        return self.bytecode


def _is_transient_rpc_error(exc: Exception) -> bool:
    if isinstance(exc, (TimeoutError, ConnectionError, aiohttp.ClientConnectionError)):
        return True
    status = getattr(exc, "status", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status in _RETRYABLE_HTTP_STATUS


class ContractBytecodeSource:
    """Reads the minipool creation bytecode from ``rocketMinipoolManager``."""

    def __init__(self, contracts: RocketPoolContracts, *, max_retries: int = 3):
        self.contracts = contracts
        self.max_retries = max_retries

    async def get_minipool_bytecode(self) -> bytes:
        try:
            manager = await self.contracts.get_contract(
                ROCKET_MINIPOOL_MANAGER, abi=ROCKET_MINIPOOL_MANAGER_ABI
            )
            logger.debug(
                f"Fetching minipool bytecode from {ROCKET_MINIPOOL_MANAGER} at {manager.address}"
            )
            bytecode = await retry_async(
                lambda: manager.functions.getMinipoolBytecode().call(),
                max_retries=self.max_retries,
                should_retry=_is_transient_rpc_error,
                label="getMinipoolBytecode",
            )
        except Exception as exc:
            raise BytecodeUnavailableError(
                f"Error getting minipool bytecode: {exc}"
            ) from exc
        if not bytecode:
            raise BytecodeUnavailableError("rocketMinipoolManager returned empty bytecode")
        return bytes(bytecode)
