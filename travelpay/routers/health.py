from fastapi import APIRouter

from travelpay.config import settings

router = APIRouter(tags=["Health"])


@router.get("")
def health():
    return {"ok": True, "app": settings.APP_NAME, "version": settings.APP_VERSION}
