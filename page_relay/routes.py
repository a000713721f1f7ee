import logging

from fastapi import APIRouter

from page_relay.app_proxy.route import router as proxy_router
from page_relay.vars import PROXY_PATH

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

logger.info(f"Serving proxy at {PROXY_PATH}")


@router.get("/health")
async def health():
    return {"status": "ok"}


router.include_router(proxy_router)
