from __future__ import annotations

from eth_utils import to_checksum_address

from rocketpool_paths.core.constants.chains import CHAIN_ID_ETHEREUM, CHAIN_ID_HOLESKY

# Rocket Pool resolves every network contract through RocketStorage.
#
# Deployed contracts:
# - https://docs.rocketpool.net/overview/contracts-integrations
ROCKET_STORAGE_BY_CHAIN: dict[int, str] = {
    CHAIN_ID_ETHEREUM: to_checksum_address("0x1d8f8f00cfa6758d7bE78336684788Fb0ee0Fa46"),
    CHAIN_ID_HOLESKY: to_checksum_address("0x594Fb75D3dc2DFa0150Ad03F99F97817747dd4E1"),
}

ROCKET_MINIPOOL = "rocketMinipool"
ROCKET_MINIPOOL_MANAGER = "rocketMinipoolManager"
ROCKET_STORAGE = "rocketStorage"

# RocketStorage key prefixes, hashed together with the contract name
CONTRACT_ADDRESS_KEY_PREFIX = b"contract.address"
CONTRACT_ABI_KEY_PREFIX = b"contract.abi"
