from pydantic import BaseModel

from rocketpool_paths.core.constants.minipool import MinipoolDeposit


class MinipoolAddressPrediction(BaseModel):
    chain_id: int
    minipool_address: str
    withdrawal_credentials: str
    node_address: str
    deposit_type: MinipoolDeposit
    salt: int
    node_salt: str
    minipool_manager_address: str
    rocket_storage_address: str


class MinipoolSaltMatch(BaseModel):
    salt: int
    minipool_address: str
    attempts: int
