from fastapi import APIRouter

from app.api.v1.blobs import router as blobs_router

router = APIRouter()
router.include_router(blobs_router)
