"""Off-chain prediction of Rocket Pool minipool addresses.

The minipool manager deploys each minipool with CREATE2 (EIP-1014), so the
address is known before deployment:

    node_salt = keccak256(node_address ++ uint256(salt))
    init_code = minipool_bytecode ++ abi.encode(rocket_storage, node_address, deposit_type)
    address   = keccak256(0xff ++ manager_address ++ node_salt ++ keccak256(init_code))[12:]

The deposit type only reaches the hash through the constructor arguments; it is
never mixed into the salt.

Reference: https://eips.ethereum.org/EIPS/eip-1014
"""

from __future__ import annotations

from typing import Any

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError
from eth_utils import keccak, to_checksum_address

from rocketpool_paths.core.constants.base import (
    CREATE2_PREFIX,
    HASH_LENGTH,
    WITHDRAWAL_CREDENTIALS_PADDING,
    WITHDRAWAL_CREDENTIALS_PREFIX,
)
from rocketpool_paths.core.constants.minipool import MinipoolDeposit, to_minipool_deposit
from rocketpool_paths.core.constants.rocketpool_abi import ROCKET_MINIPOOL_ABI
from rocketpool_paths.core.constants.rocketpool_contracts import ROCKET_MINIPOOL
from rocketpool_paths.core.errors import (
    BytecodeUnavailableError,
    InvalidInputError,
    SchemaUnavailableError,
)
from rocketpool_paths.core.utils.bytes import (
    AddressLike,
    hex_to_bytes,
    int_to_bytes32,
    require_length,
    to_address_bytes,
)
from rocketpool_paths.core.utils.contract_registry import BytecodeSource


def get_constructor_types(abi: list[dict[str, Any]] | None) -> list[str]:
    for entry in abi or []:
        if entry.get("type") == "constructor":
            return [str(inp["type"]) for inp in entry.get("inputs", [])]
    raise SchemaUnavailableError(ROCKET_MINIPOOL, "Minipool ABI has no constructor")


def encode_constructor_args(
    rocket_storage_address: AddressLike,
    node_address: AddressLike,
    deposit_type: MinipoolDeposit | int | str,
    *,
    abi: list[dict[str, Any]] | None = None,
) -> bytes:
    """ABI-encode the minipool constructor arguments (no selector).

    ``abi`` defaults to the bundled minipool ABI; pass the ABI fetched from
    RocketStorage to encode against the deployed schema.
    """
    storage = to_address_bytes(rocket_storage_address, "Rocket storage address")
    node = to_address_bytes(node_address, "Node address")
    deposit = to_minipool_deposit(deposit_type)
    types = get_constructor_types(ROCKET_MINIPOOL_ABI if abi is None else abi)
    try:
        return abi_encode(
            types,
            [to_checksum_address(storage), to_checksum_address(node), int(deposit)],
        )
    except EncodingError as exc:
        raise SchemaUnavailableError(
            ROCKET_MINIPOOL,
            f"Minipool constructor ({','.join(types)}) does not accept (address,address,uint8): {exc}",
        ) from exc


def derive_salt(node_address: AddressLike, salt: int) -> bytes:
    """Fold the caller's salt into the per-node CREATE2 salt."""
    node = to_address_bytes(node_address, "Node address")
    return keccak(node + int_to_bytes32(salt))


def derive_address_with_code_hash(
    factory_address: AddressLike,
    deployment_salt: bytes,
    init_code_hash: bytes,
) -> bytes:
    factory = to_address_bytes(factory_address, "Factory address")
    salt = require_length(deployment_salt, HASH_LENGTH, "Deployment salt")
    code_hash = require_length(init_code_hash, HASH_LENGTH, "Init code hash")
    return keccak(CREATE2_PREFIX + factory + salt + code_hash)[12:]


def derive_address(
    factory_address: AddressLike,
    deployment_salt: bytes,
    init_code: bytes,
) -> bytes:
    """
    Compute the CREATE2 address for ``init_code`` deployed by ``factory_address``.

    Returns:
        20-byte address: keccak256(0xff ++ factory ++ salt ++ keccak256(init_code))[12:]

    Raises:
        InvalidInputError: If the factory is not 20 bytes or the salt is not 32 bytes
    """
    if not isinstance(init_code, (bytes, bytearray)):
        raise InvalidInputError(
            f"Init code must be bytes, got {type(init_code).__name__}"
        )
    return derive_address_with_code_hash(
        factory_address, deployment_salt, keccak(bytes(init_code))
    )


def encode_withdrawal_credentials(address: AddressLike) -> bytes:
    """0x01 withdrawal credentials pointing at ``address``."""
    return (
        WITHDRAWAL_CREDENTIALS_PREFIX
        + WITHDRAWAL_CREDENTIALS_PADDING
        + to_address_bytes(address)
    )


def build_init_code(
    minipool_bytecode: bytes,
    rocket_storage_address: AddressLike,
    node_address: AddressLike,
    deposit_type: MinipoolDeposit | int | str,
    *,
    abi: list[dict[str, Any]] | None = None,
) -> bytes:
    if not minipool_bytecode:
        raise BytecodeUnavailableError("Minipool bytecode is empty")
    return bytes(minipool_bytecode) + encode_constructor_args(
        rocket_storage_address, node_address, deposit_type, abi=abi
    )


async def resolve_minipool_bytecode(
    minipool_bytecode: bytes | str | None,
    bytecode_source: BytecodeSource | None,
) -> bytes:
    """Return caller-supplied bytecode, else ask ``bytecode_source``.

    Never falls back to empty bytecode.
    """
    bytecode = hex_to_bytes(minipool_bytecode)
    if bytecode:
        return bytecode
    if bytecode_source is None:
        raise BytecodeUnavailableError(
            "No minipool bytecode supplied and no bytecode source configured"
        )
    try:
        bytecode = await bytecode_source.get_minipool_bytecode()
    except BytecodeUnavailableError:
        raise
    except Exception as exc:
        raise BytecodeUnavailableError(
            f"Error getting minipool bytecode: {exc}"
        ) from exc
    if not bytecode:
        raise BytecodeUnavailableError("Bytecode source returned empty bytecode")
    return bytes(bytecode)


async def generate_minipool_address(
    *,
    rocket_storage_address: AddressLike,
    minipool_manager_address: AddressLike,
    node_address: AddressLike,
    deposit_type: MinipoolDeposit | int | str,
    salt: int,
    minipool_bytecode: bytes | str | None = None,
    bytecode_source: BytecodeSource | None = None,
    abi: list[dict[str, Any]] | None = None,
) -> bytes:
    """
    Precompute the address of a minipool for a node, deposit type and salt.

    If ``minipool_bytecode`` is empty it is fetched from ``bytecode_source``
    (anything with an async ``get_minipool_bytecode()``).

    Raises:
        InvalidInputError: On malformed addresses, salt or deposit type
        SchemaUnavailableError: If ``abi`` has no constructor
        BytecodeUnavailableError: If no bytecode could be obtained
    """
    # Inputs are validated before the bytecode lookup.
    manager = to_address_bytes(minipool_manager_address, "Minipool manager address")
    node = to_address_bytes(node_address, "Node address")
    constructor_args = encode_constructor_args(
        rocket_storage_address, node, deposit_type, abi=abi
    )
    node_salt = derive_salt(node, salt)

    bytecode = await resolve_minipool_bytecode(minipool_bytecode, bytecode_source)
    return derive_address(manager, node_salt, bytecode + constructor_args)
