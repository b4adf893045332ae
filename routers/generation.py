from fastapi import APIRouter

from api_utils import api_not_implemented

router = APIRouter(prefix="/api/generation", tags=["generation"])


@router.post("/generate-missing")
def generate_missing():
    # body is not read, so any payload (or none) gets the same answer
    return api_not_implemented()
