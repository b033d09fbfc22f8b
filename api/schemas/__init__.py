from api.schemas.chain import BlockOut, ChainOut, DataRequest, MineResponse, TamperResponse, ValidationOut
from api.schemas.common import ErrorBody, ErrorResponse

__all__ = [
    "BlockOut",
    "ChainOut",
    "DataRequest",
    "ErrorBody",
    "ErrorResponse",
    "MineResponse",
    "TamperResponse",
    "ValidationOut",
]
