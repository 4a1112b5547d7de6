from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from .. import APP_NAME, __version__
from ..models import ApiResponse

router = APIRouter()

GREETING = "Employee Insights API v1.0 - Powered by Python & FastAPI"


@router.get("/", response_class=PlainTextResponse)
def root():
    return GREETING

@router.get("/health")
def health():
    return ApiResponse.ok({"status": "ok"}, "API is running smoothly")

@router.get("/version")
def version():
    return ApiResponse.ok({"app": APP_NAME, "version": __version__}, "ok")
