# frameslot/delivery/api/templates.py
from fastapi import APIRouter, Request, Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.responses import JSONResponse
from frameslot.delivery.schemas.body import (
    AnalyzeTemplateRequest,
    AnalyzeTemplateResponse,
    ValidationFailedResponse,
)
from frameslot.config.settings import settings
from frameslot.domain.errors import DecodeFailure
from frameslot.domain.models import PRINT_DIMENSIONS
import binascii
import base64
import secrets
import logging
import traceback
import asyncio

router = APIRouter()
security = HTTPBasic()
logger = logging.getLogger("uvicorn.error")

def verify_basic_auth(creds: HTTPBasicCredentials = Depends(security)) -> None:
    ok_user = secrets.compare_digest(creds.username, settings.BASIC_AUTH_USERNAME)
    ok_pass = secrets.compare_digest(creds.password, settings.BASIC_AUTH_PASSWORD)
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

def decode_image_payload(src: str) -> bytes:
    if src.startswith("data:image"):
        _, encoded = src.split(",", 1)
        return base64.b64decode(encoded + "===")
    return base64.b64decode(src + "===")

@router.post("/templates/analyze", dependencies=[Depends(verify_basic_auth)])
async def analyze_template(request: Request, body: AnalyzeTemplateRequest):
    template_id = body.id
    logger.info(f"=== ANALYZE START for {template_id} ===")

    try:
        service = getattr(request.app.state, "template_service", None)
        if service is None:
            logger.error(f"Service not initialized for template {template_id}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service is not ready. Please try again in a moment.",
            )

        try:
            image_bytes = decode_image_payload(body.image)
        except (binascii.Error, ValueError):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image payload is not valid base64.")

        try:
            analysis = await asyncio.wait_for(
                service.analyze(
                    image_bytes,
                    template_id,
                    filename=body.filename,
                    print_size=body.print_size,
                    source_id=body.source_id,
                    last_modified=body.last_modified,
                ),
                timeout=settings.ENDPOINT_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(f"=== ANALYZE TIMEOUT for {template_id} after {settings.ENDPOINT_TIMEOUT_SECONDS}s ===")
            raise HTTPException(status_code=504, detail="Template analysis timed out")
        except DecodeFailure as e:
            logger.warning(f"[{template_id}] {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        if not analysis.is_valid:
            logger.info(f"=== ANALYZE REJECTED for {template_id}: {len(analysis.report.violations)} violations ===")
            payload = ValidationFailedResponse(
                violations=list(analysis.report.violations),
                warnings=list(analysis.report.warnings),
            )
            return JSONResponse(status_code=422, content=payload.model_dump(mode="json"))

        logger.info(f"=== ANALYZE SUCCESS for {template_id} ===")
        return AnalyzeTemplateResponse(
            definition=analysis.definition,
            warnings=list(analysis.report.warnings),
            cached=analysis.cached,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== ANALYZE ERROR for {template_id}: {e} ===\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Terjadi kesalahan internal pada server.",
        )

@router.get("/print-sizes")
async def print_sizes():
    return {size.value: dims.model_dump() for size, dims in PRINT_DIMENSIONS.items()}
