ADDRESS_LENGTH = 20
HASH_LENGTH = 32
WORD_LENGTH = 32

MAX_UINT256 = 2**256 - 1

# EIP-1014 domain separator for CREATE2 address preimages
CREATE2_PREFIX = b"\xff"

# Execution-layer (0x01) withdrawal credentials: prefix, 11 zero bytes, address
WITHDRAWAL_CREDENTIALS_PREFIX = b"\x01"
WITHDRAWAL_CREDENTIALS_PADDING = b"\x00" * 11

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
