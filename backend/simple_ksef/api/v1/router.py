from fastapi import APIRouter

from simple_ksef.api.v1.invoice import router as invoice_router
from simple_ksef.api.v1.taxpayer import router as taxpayer_router

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


router.include_router(invoice_router)
router.include_router(taxpayer_router)
