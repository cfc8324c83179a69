from uuid import uuid4

from fastapi import APIRouter

from simple_ksef.domain.normalize import normalize_graph
from simple_ksef.domain.schema import CreateInvoiceRequest, CreateInvoiceResponse
from simple_ksef.domain.validate import validate_request

router = APIRouter(prefix="/invoice", tags=["invoice"])


@router.post(
    "",
    response_model=CreateInvoiceResponse,
    responses={400: {"description": "Invalid invoice data"}},
)
def create_invoice(req: CreateInvoiceRequest) -> CreateInvoiceResponse:
    normalize_graph(req)
    validate_request(req)

    return CreateInvoiceResponse(id=str(uuid4()))
