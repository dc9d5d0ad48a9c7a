from __future__ import annotations

import asyncio
from typing import Any

from eth_utils import keccak, to_checksum_address

from rocketpool_paths.core.adapters.BaseAdapter import BaseAdapter
from rocketpool_paths.core.adapters.decorators import status_tuple
from rocketpool_paths.core.adapters.models import (
    MinipoolAddressPrediction,
    MinipoolSaltMatch,
)
from rocketpool_paths.core.config import (
    get_minipool_bytecode_override,
    get_rocket_storage_address,
)
from rocketpool_paths.core.constants.base import MAX_UINT256
from rocketpool_paths.core.constants.minipool import MinipoolDeposit, to_minipool_deposit
from rocketpool_paths.core.constants.rocketpool_contracts import (
    ROCKET_MINIPOOL,
    ROCKET_MINIPOOL_MANAGER,
    ROCKET_STORAGE_BY_CHAIN,
)
from rocketpool_paths.core.errors import InvalidInputError, SchemaUnavailableError
from rocketpool_paths.core.utils.address_generation import (
    build_init_code,
    derive_address_with_code_hash,
    derive_salt,
    encode_withdrawal_credentials,
    generate_minipool_address,
    resolve_minipool_bytecode,
)
from rocketpool_paths.core.utils.bytes import hex_to_bytes, to_address_bytes
from rocketpool_paths.core.utils.contract_registry import (
    AbiProvider,
    BytecodeSource,
    ContractBytecodeSource,
    RocketPoolContracts,
    StaticAbiProvider,
    StaticBytecodeSource,
)
from rocketpool_paths.core.utils.web3 import web3_from_chain_id

# Let other tasks run while scanning salts.
_SALT_SCAN_YIELD_EVERY = 10_000


def _hex(value: bytes) -> str:
    return "0x" + value.hex()


def _normalize_prefix(prefix: str) -> str:
    p = prefix.strip().lower().removeprefix("0x")
    if not p or len(p) > 40 or any(c not in "0123456789abcdef" for c in p):
        raise InvalidInputError(f"Invalid address prefix: {prefix!r}")
    return p


class MinipoolAdapter(BaseAdapter):
    adapter_type = "ROCKETPOOL_MINIPOOL"

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        bytecode_source: BytecodeSource | None = None,
        abi_provider: AbiProvider | None = None,
        use_storage_abi: bool = False,
    ) -> None:
        super().__init__("minipool_adapter", config or {})
        override = self.config.get("minipool_bytecode") or get_minipool_bytecode_override()
        if bytecode_source is None and override:
            bytecode_source = StaticBytecodeSource(override)
        self.bytecode_source = bytecode_source
        self.abi_provider = abi_provider
        self.use_storage_abi = use_storage_abi

    def _storage_address(self, chain_id: int) -> str:
        address = get_rocket_storage_address(chain_id) or ROCKET_STORAGE_BY_CHAIN.get(
            int(chain_id)
        )
        if not address:
            raise ValueError(f"Unsupported Rocket Pool chain_id={chain_id}")
        return to_checksum_address(address)

    async def _resolve_deployment(
        self,
        *,
        chain_id: int,
        minipool_manager_address: str | None,
        minipool_bytecode: bytes | str | None,
    ) -> tuple[str, bytes, bytes, list[dict[str, Any]]]:
        """Return ``(storage, manager, bytecode, minipool_abi)`` for ``chain_id``.

        Stays offline when the manager address, bytecode and ABI are all known.
        """
        storage = self._storage_address(chain_id)
        bytecode = hex_to_bytes(minipool_bytecode)
        needs_chain = (
            minipool_manager_address is None
            or (not bytecode and self.bytecode_source is None)
            or (self.abi_provider is None and self.use_storage_abi)
        )

        if not needs_chain:
            manager = to_address_bytes(minipool_manager_address, "Minipool manager address")
            abi = await self._get_minipool_abi(self.abi_provider or StaticAbiProvider())
            bytecode = await resolve_minipool_bytecode(bytecode, self.bytecode_source)
            return storage, manager, bytecode, abi

        async with web3_from_chain_id(chain_id) as web3:
            contracts = RocketPoolContracts(web3, storage)
            if minipool_manager_address is None:
                minipool_manager_address = await contracts.get_address(
                    ROCKET_MINIPOOL_MANAGER
                )
            manager = to_address_bytes(minipool_manager_address, "Minipool manager address")
            provider = self.abi_provider or (
                contracts if self.use_storage_abi else StaticAbiProvider()
            )
            abi = await self._get_minipool_abi(provider)
            source = self.bytecode_source or ContractBytecodeSource(contracts)
            bytecode = await resolve_minipool_bytecode(bytecode, source)
        self.logger.debug(
            f"Resolved minipool deployment chain={chain_id} manager={to_checksum_address(manager)} bytecode_len={len(bytecode)}"
        )
        return storage, manager, bytecode, abi

    async def _get_minipool_abi(self, provider: AbiProvider) -> list[dict[str, Any]]:
        try:
            return await provider.get_abi(ROCKET_MINIPOOL)
        except SchemaUnavailableError:
            raise
        except Exception as exc:
            raise SchemaUnavailableError(ROCKET_MINIPOOL, str(exc)) from exc

    @status_tuple
    async def predict_minipool_address(
        self,
        *,
        node_address: str,
        deposit_type: MinipoolDeposit | int | str,
        salt: int,
        minipool_bytecode: bytes | str | None = None,
        minipool_manager_address: str | None = None,
        chain_id: int | None = None,
    ) -> MinipoolAddressPrediction:
        """
        Predict where the minipool manager will deploy a node's next minipool.

        Notes:
        - ``salt`` is the node's raw salt; the CREATE2 salt is derived from it.
        - Bytecode is read from ``rocketMinipoolManager`` unless supplied here,
          through ``bytecode_source``, or via the ``minipool_bytecode`` config key.
        """
        chain_id = self._chain_id(chain_id)
        deposit = to_minipool_deposit(deposit_type)
        node = to_address_bytes(node_address, "Node address")
        node_salt = derive_salt(node, salt)
        storage, manager, bytecode, abi = await self._resolve_deployment(
            chain_id=chain_id,
            minipool_manager_address=minipool_manager_address,
            minipool_bytecode=minipool_bytecode,
        )
        address = await generate_minipool_address(
            rocket_storage_address=storage,
            minipool_manager_address=manager,
            node_address=node,
            deposit_type=deposit,
            salt=salt,
            minipool_bytecode=bytecode,
            abi=abi,
        )
        return MinipoolAddressPrediction(
            chain_id=chain_id,
            minipool_address=to_checksum_address(address),
            withdrawal_credentials=_hex(encode_withdrawal_credentials(address)),
            node_address=to_checksum_address(node),
            deposit_type=deposit,
            salt=int(salt),
            node_salt=_hex(node_salt),
            minipool_manager_address=to_checksum_address(manager),
            rocket_storage_address=storage,
        )

    @status_tuple
    async def get_withdrawal_credentials(self, *, minipool_address: str) -> str:
        return _hex(encode_withdrawal_credentials(minipool_address))

    @status_tuple
    async def find_minipool_salt(
        self,
        *,
        node_address: str,
        deposit_type: MinipoolDeposit | int | str,
        prefix: str,
        start_salt: int = 0,
        max_attempts: int = 100_000,
        minipool_bytecode: bytes | str | None = None,
        minipool_manager_address: str | None = None,
        chain_id: int | None = None,
    ) -> MinipoolSaltMatch:
        """Scan salts from ``start_salt`` for a minipool address starting with ``prefix``."""
        wanted = _normalize_prefix(prefix)
        if max_attempts < 1:
            raise InvalidInputError("max_attempts must be >= 1")
        if not 0 <= start_salt <= MAX_UINT256:
            raise InvalidInputError(f"start_salt out of range: {start_salt}")
        chain_id = self._chain_id(chain_id)
        deposit = to_minipool_deposit(deposit_type)
        node = to_address_bytes(node_address, "Node address")
        storage, manager, bytecode, abi = await self._resolve_deployment(
            chain_id=chain_id,
            minipool_manager_address=minipool_manager_address,
            minipool_bytecode=minipool_bytecode,
        )
        init_code_hash = keccak(build_init_code(bytecode, storage, node, deposit, abi=abi))

        end_salt = min(start_salt + max_attempts, MAX_UINT256 + 1)
        for attempt, salt in enumerate(range(start_salt, end_salt), start=1):
            address = derive_address_with_code_hash(
                manager, derive_salt(node, salt), init_code_hash
            )
            if address.hex().startswith(wanted):
                self.logger.info(
                    f"Found minipool salt {salt} -> {to_checksum_address(address)} after {attempt} attempts"
                )
                return MinipoolSaltMatch(
                    salt=salt,
                    minipool_address=to_checksum_address(address),
                    attempts=attempt,
                )
            if attempt % _SALT_SCAN_YIELD_EVERY == 0:
                await asyncio.sleep(0)

        raise ValueError(
            f"No salt in [{start_salt}, {end_salt}) yields a minipool address starting with 0x{wanted}"
        )
