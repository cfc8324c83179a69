from uuid import UUID, uuid4

from fastapi import APIRouter, HTTPException, Request, Response, status

from simple_ksef.domain.normalize import normalize_graph
from simple_ksef.domain.schema import (
    CreateTaxpayerRequest,
    CreateTaxpayerResponse,
    GetTaxpayerResponse,
)
from simple_ksef.domain.validate import validate_request

router = APIRouter(prefix="/taxpayer", tags=["taxpayer"])


@router.post(
    "",
    response_model=CreateTaxpayerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid taxpayer data"}},
)
def create_taxpayer(
    req: CreateTaxpayerRequest, request: Request, response: Response
) -> CreateTaxpayerResponse:
    normalize_graph(req)
    validate_request(req)

    taxpayer_id = uuid4()
    response.headers["Location"] = str(
        request.url_for("get_taxpayer", taxpayer_id=str(taxpayer_id))
    )
    return CreateTaxpayerResponse(id=taxpayer_id)


@router.get(
    "/{taxpayer_id}",
    response_model=GetTaxpayerResponse,
    responses={404: {"description": "Taxpayer with given identifier was not found"}},
)
def get_taxpayer(taxpayer_id: UUID) -> GetTaxpayerResponse:
    raise HTTPException(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        detail="Taxpayer retrieval is not implemented yet.",
    )
