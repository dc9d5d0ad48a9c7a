from __future__ import annotations

from typing import Any

# Minimal ABIs for Rocket Pool (RocketStorage / RocketMinipool / RocketMinipoolManager).

ROCKET_STORAGE_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getAddress",
        "stateMutability": "view",
        "inputs": [{"name": "_key", "type": "bytes32"}],
        "outputs": [{"name": "r", "type": "address"}],
    },
    {
        "type": "function",
        "name": "getString",
        "stateMutability": "view",
        "inputs": [{"name": "_key", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "string"}],
    },
]

# Only the constructor is needed to build CREATE2 init code.
ROCKET_MINIPOOL_ABI: list[dict[str, Any]] = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_rocketStorageAddress", "type": "address"},
            {"name": "_nodeAddress", "type": "address"},
            {"name": "_depositType", "type": "uint8"},
        ],
    },
]

ROCKET_MINIPOOL_MANAGER_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getMinipoolBytecode",
        "stateMutability": "pure",
        "inputs": [],
        "outputs": [{"name": "", "type": "bytes"}],
    },
]
