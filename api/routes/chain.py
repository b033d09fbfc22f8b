from __future__ import annotations

from fastapi import APIRouter, Depends

from api.auth import AuthDep
from api.deps import get_chain_service
from api.schemas.chain import ChainOut, DataRequest, MineResponse, TamperResponse, ValidationOut
from api.schemas.common import ErrorResponse
from powchain.service import ChainService

router = APIRouter()

_ERRORS = {400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}}


@router.get("/")
def index() -> dict:
    return {"message": "powchain API. Try /blockchain, /mine, /validate or /tamper/{index}."}


@router.get("/blockchain", response_model=ChainOut)
def get_chain(service: ChainService = Depends(get_chain_service)) -> dict:
    return service.snapshot()


@router.post(
    "/mine",
    status_code=201,
    response_model=MineResponse,
    responses=_ERRORS,
    dependencies=[AuthDep],
)
def mine(
    body: DataRequest | None = None,
    service: ChainService = Depends(get_chain_service),
) -> dict:
    block = service.mine(body.data if body is not None else None)
    return {
        "message": "New block mined and added successfully!",
        "newBlock": block.to_wire(),
    }


@router.get("/validate", response_model=ValidationOut, response_model_exclude_none=True)
def validate(service: ChainService = Depends(get_chain_service)) -> dict:
    return service.validate().to_wire()


@router.post(
    "/tamper/{block_index}",
    response_model=TamperResponse,
    responses=_ERRORS,
    dependencies=[AuthDep],
)
def tamper(
    block_index: str,
    body: DataRequest | None = None,
    service: ChainService = Depends(get_chain_service),
) -> dict:
    index, block = service.tamper(block_index, body.data if body is not None else None)
    return {
        "message": f"Tampered with block {index}. Run /validate to see the effect.",
        "block": block.to_wire(),
    }
