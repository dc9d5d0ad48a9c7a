CHAIN_ID_ETHEREUM = 1
CHAIN_ID_HOLESKY = 17000
