__version__ = "0.1.0"

from rocketpool_paths.core import (
    BaseAdapter,
    BytecodeUnavailableError,
    InvalidInputError,
    SchemaUnavailableError,
)
from rocketpool_paths.core.constants.minipool import MinipoolDeposit
from rocketpool_paths.core.utils.address_generation import (
    derive_address,
    derive_salt,
    encode_constructor_args,
    encode_withdrawal_credentials,
    generate_minipool_address,
)

__all__ = [
    "__version__",
    "BaseAdapter",
    "BytecodeUnavailableError",
    "InvalidInputError",
    "MinipoolDeposit",
    "SchemaUnavailableError",
    "derive_address",
    "derive_salt",
    "encode_constructor_args",
    "encode_withdrawal_credentials",
    "generate_minipool_address",
]
