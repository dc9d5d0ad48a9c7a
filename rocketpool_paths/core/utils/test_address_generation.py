from unittest.mock import AsyncMock

import pytest

from rocketpool_paths.core.constants.base import MAX_UINT256
from rocketpool_paths.core.constants.minipool import MinipoolDeposit
from rocketpool_paths.core.errors import (
    BytecodeUnavailableError,
    InvalidInputError,
    SchemaUnavailableError,
)
from rocketpool_paths.core.utils.address_generation import (
    derive_address,
    derive_address_with_code_hash,
    derive_salt,
    encode_constructor_args,
    encode_withdrawal_credentials,
    generate_minipool_address,
)

STORAGE = bytes.fromhex("11" * 20)
NODE = bytes.fromhex("22" * 20)
MANAGER = bytes.fromhex("33" * 20)
BYTECODE = bytes.fromhex("602a60005260206000f3")

# Computed independently: keccak256(0xff ++ manager ++ keccak256(node ++ uint256(salt))
#   ++ keccak256(BYTECODE ++ abi.encode(storage, node, uint8(deposit))))[12:]
GOLDEN = [
    (
        MinipoolDeposit.NONE,
        0,
        "12ea79b40ec635f02a0de57d8cddc2d7c62dc36d0f012f359fa5c9aa5637ac7f",
        "be430d7819bbc5a3bb71e4950f46233df5ada4ec",
    ),
    (
        MinipoolDeposit.FULL,
        12345,
        "5b79a93ad96d72b1b886ed13264c2f463a2707a40ecdf9d23e9a079610115fea",
        "ab7abf5fa86aaf20245f795075bf8b776feae925",
    ),
    (
        MinipoolDeposit.NONE,
        MAX_UINT256,
        "59c3662410ae6ff458d0c87349351b745c239df5acad9c02295f7c91606bf81a",
        "eef518c18026a7212ea7a54ca630ca0d70cf1847",
    ),
]


def _minipool_address(deposit_type, salt, bytecode=BYTECODE, node=NODE):
    init_code = bytecode + encode_constructor_args(STORAGE, node, deposit_type)
    return derive_address(MANAGER, derive_salt(node, salt), init_code)


@pytest.mark.parametrize(
    "deposit_type,code",
    [
        (MinipoolDeposit.NONE, 0),
        (MinipoolDeposit.FULL, 1),
        (MinipoolDeposit.HALF, 2),
        (MinipoolDeposit.EMPTY, 3),
    ],
)
def test_deposit_type_numeric_codes(deposit_type, code):
    assert int(deposit_type) == code
    args = encode_constructor_args(STORAGE, NODE, deposit_type)
    assert args[64:] == code.to_bytes(32, "big")


def test_deposit_type_table_is_closed():
    assert [(m.name, m.value) for m in MinipoolDeposit] == [
        ("NONE", 0),
        ("FULL", 1),
        ("HALF", 2),
        ("EMPTY", 3),
    ]


def test_encode_constructor_args_layout():
    args = encode_constructor_args(STORAGE, NODE, MinipoolDeposit.HALF)
    assert len(args) == 96
    assert args[:32] == bytes(12) + STORAGE
    assert args[32:64] == bytes(12) + NODE
    assert args[64:] == bytes(31) + b"\x02"


def test_encode_constructor_args_accepts_hex_strings_and_names():
    from_bytes = encode_constructor_args(STORAGE, NODE, MinipoolDeposit.FULL)
    from_hex = encode_constructor_args("0x" + "11" * 20, "0x" + "22" * 20, "full")
    assert from_bytes == from_hex


def test_encode_constructor_args_rejects_unknown_deposit_type():
    with pytest.raises(InvalidInputError):
        encode_constructor_args(STORAGE, NODE, 4)


def test_encode_constructor_args_without_constructor_in_abi():
    abi = [{"type": "function", "name": "foo", "inputs": []}]
    with pytest.raises(SchemaUnavailableError):
        encode_constructor_args(STORAGE, NODE, MinipoolDeposit.FULL, abi=abi)


def test_encode_constructor_args_rejects_mismatched_constructor():
    abi = [{"type": "constructor", "inputs": [{"name": "_storage", "type": "address"}]}]
    with pytest.raises(SchemaUnavailableError, match="does not accept"):
        encode_constructor_args(STORAGE, NODE, MinipoolDeposit.FULL, abi=abi)


@pytest.mark.parametrize("deposit_type,salt,node_salt,address", GOLDEN)
def test_golden_vectors(deposit_type, salt, node_salt, address):
    assert derive_salt(NODE, salt).hex() == node_salt
    assert _minipool_address(deposit_type, salt).hex() == address


def test_derive_salt_boundaries():
    assert len(derive_salt(NODE, 0)) == 32
    assert len(derive_salt(NODE, MAX_UINT256)) == 32
    with pytest.raises(InvalidInputError, match="does not fit in 32 bytes"):
        derive_salt(NODE, MAX_UINT256 + 1)


def test_derive_salt_rejects_negative_and_non_int():
    with pytest.raises(InvalidInputError):
        derive_salt(NODE, -1)
    with pytest.raises(InvalidInputError):
        derive_salt(NODE, True)
    with pytest.raises(InvalidInputError):
        derive_salt(NODE, "1")


def test_derive_salt_ignores_deposit_type():
    # Deposit type only reaches the hash via the constructor args.
    a = _minipool_address(MinipoolDeposit.FULL, 7)
    b = _minipool_address(MinipoolDeposit.HALF, 7)
    assert a != b
    assert derive_salt(NODE, 7) == derive_salt(NODE, 7)


def test_derive_address_eip1014_vectors():
    assert (
        derive_address(bytes(20), bytes(32), b"\x00").hex()
        == "4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38"
    )
    assert (
        derive_address(
            bytes.fromhex("00000000000000000000000000000000deadbeef"),
            bytes.fromhex("00" * 28 + "cafebabe"),
            bytes.fromhex("deadbeef"),
        ).hex()
        == "60f3f640a8508fc6a86d45df051962668e1e8ac7"
    )
    assert (
        derive_address(bytes(20), bytes(32), b"").hex()
        == "e33c0c7f7df4809055c3eba6c09cfe4baf1bd9e0"
    )


def test_derive_address_matches_code_hash_variant():
    from eth_utils import keccak

    salt = derive_salt(NODE, 1)
    init_code = BYTECODE + encode_constructor_args(STORAGE, NODE, 1)
    assert derive_address(MANAGER, salt, init_code) == derive_address_with_code_hash(
        MANAGER, salt, keccak(init_code)
    )


def test_derive_address_is_deterministic():
    assert _minipool_address(MinipoolDeposit.FULL, 42) == _minipool_address(
        MinipoolDeposit.FULL, 42
    )


def test_derive_address_sensitive_to_every_input():
    base = _minipool_address(MinipoolDeposit.FULL, 42)
    assert _minipool_address(MinipoolDeposit.FULL, 43) != base
    assert _minipool_address(MinipoolDeposit.EMPTY, 42) != base
    assert _minipool_address(MinipoolDeposit.FULL, 42, bytecode=BYTECODE + b"\x00") != base
    assert (
        _minipool_address(MinipoolDeposit.FULL, 42, node=bytes.fromhex("22" * 19 + "23"))
        != base
    )


@pytest.mark.parametrize(
    "factory,salt,match",
    [
        (bytes(19), bytes(32), "Factory address must be 20 bytes"),
        (bytes(21), bytes(32), "Factory address must be 20 bytes"),
        (bytes(20), bytes(31), "Deployment salt must be 32 bytes"),
        ("0x1234", bytes(32), "Factory address must be a 20-byte hex string"),
    ],
)
def test_derive_address_rejects_bad_widths(factory, salt, match):
    with pytest.raises(InvalidInputError, match=match):
        derive_address(factory, salt, b"\x00")


def test_encode_withdrawal_credentials_layout():
    address = bytes.fromhex("ab" * 20)
    creds = encode_withdrawal_credentials(address)
    assert len(creds) == 32
    assert creds[0] == 0x01
    assert creds[1:12] == bytes(11)
    assert creds[12:] == address


def test_withdrawal_credentials_of_derived_address():
    address = _minipool_address(MinipoolDeposit.FULL, 12345)
    creds = encode_withdrawal_credentials(address)
    assert creds.hex() == "01" + "00" * 11 + "ab7abf5fa86aaf20245f795075bf8b776feae925"
    assert creds[12:] == address


def test_encode_withdrawal_credentials_rejects_short_address():
    with pytest.raises(InvalidInputError):
        encode_withdrawal_credentials(bytes(19))


@pytest.mark.asyncio
async def test_generate_minipool_address_with_supplied_bytecode():
    source = AsyncMock()
    address = await generate_minipool_address(
        rocket_storage_address=STORAGE,
        minipool_manager_address=MANAGER,
        node_address=NODE,
        deposit_type=MinipoolDeposit.NONE,
        salt=0,
        minipool_bytecode=BYTECODE,
        bytecode_source=source,
    )
    assert address.hex() == "be430d7819bbc5a3bb71e4950f46233df5ada4ec"
    source.get_minipool_bytecode.assert_not_called()


@pytest.mark.asyncio
async def test_generate_minipool_address_fetches_bytecode_when_missing():
    source = AsyncMock()
    source.get_minipool_bytecode.return_value = BYTECODE
    address = await generate_minipool_address(
        rocket_storage_address="0x" + "11" * 20,
        minipool_manager_address="0x" + "33" * 20,
        node_address="0x" + "22" * 20,
        deposit_type=MinipoolDeposit.FULL,
        salt=12345,
        minipool_bytecode=b"",
        bytecode_source=source,
    )
    assert address.hex() == "ab7abf5fa86aaf20245f795075bf8b776feae925"
    source.get_minipool_bytecode.assert_awaited_once()


@pytest.mark.asyncio
async def test_generate_minipool_address_without_bytecode_or_source():
    with pytest.raises(BytecodeUnavailableError):
        await generate_minipool_address(
            rocket_storage_address=STORAGE,
            minipool_manager_address=MANAGER,
            node_address=NODE,
            deposit_type=MinipoolDeposit.FULL,
            salt=0,
        )


@pytest.mark.asyncio
async def test_generate_minipool_address_source_returns_empty():
    source = AsyncMock()
    source.get_minipool_bytecode.return_value = b""
    with pytest.raises(BytecodeUnavailableError):
        await generate_minipool_address(
            rocket_storage_address=STORAGE,
            minipool_manager_address=MANAGER,
            node_address=NODE,
            deposit_type=MinipoolDeposit.FULL,
            salt=0,
            bytecode_source=source,
        )


@pytest.mark.asyncio
async def test_generate_minipool_address_wraps_source_failure():
    source = AsyncMock()
    source.get_minipool_bytecode.side_effect = ConnectionError("rpc down")
    with pytest.raises(BytecodeUnavailableError, match="rpc down") as exc_info:
        await generate_minipool_address(
            rocket_storage_address=STORAGE,
            minipool_manager_address=MANAGER,
            node_address=NODE,
            deposit_type=MinipoolDeposit.FULL,
            salt=0,
            bytecode_source=source,
        )
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    source.get_minipool_bytecode.assert_awaited_once()


@pytest.mark.asyncio
async def test_generate_minipool_address_rejects_bad_salt_before_lookup():
    source = AsyncMock()
    with pytest.raises(InvalidInputError):
        await generate_minipool_address(
            rocket_storage_address=STORAGE,
            minipool_manager_address=MANAGER,
            node_address=NODE,
            deposit_type=MinipoolDeposit.FULL,
            salt=2**256,
            bytecode_source=source,
        )
    source.get_minipool_bytecode.assert_not_called()
