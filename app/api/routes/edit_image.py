"""
Edit-image API used by the editor UI.
POST /api/edit-image passes the raw provider reply through; POST /api/variations
returns normalized variations with download filenames.
"""
import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.schemas.edit_image import (
    ApiStatusOut,
    EditImageRequest,
    EditImageSuccess,
    VariationOut,
    VariationsOut,
)
from app.services.image_generation import (
    ClassifiedError,
    ImageGenerationProvider,
    ImageProviderFactory,
    UnexpectedError,
    generate_variations,
    submit_generation,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["edit-image"])


class UnconfiguredProvider(ImageGenerationProvider):
    """Stands in when settings name no known provider; every send fails with a 500 envelope."""

    name = "unconfigured"

    def __init__(self, reason: str):
        super().__init__({})
        self.reason = reason

    def is_available(self) -> bool:
        return False

    def build_payload(self, request):
        return {}

    def send(self, request):
        raise UnexpectedError("サーバーエラー", details=self.reason)


def get_provider() -> ImageGenerationProvider:
    """Provider built from process settings; the credential is injected here and nowhere else."""
    try:
        return ImageProviderFactory.create_from_settings(settings)
    except ValueError as e:
        logger.error("image_provider_misconfigured: %s", e)
        return UnconfiguredProvider(str(e))


def error_response(error: ClassifiedError) -> JSONResponse:
    """Error envelope: {error, status, details?, solution?} with the mirrored HTTP status."""
    content: dict = {"error": error.user_message, "status": error.http_status}
    if error.raw_details:
        content["details"] = error.raw_details
    if error.solution:
        content["solution"] = error.solution
    return JSONResponse(status_code=error.http_status, content=content)


@router.post("/edit-image", response_model=EditImageSuccess)
def edit_image(
    body: EditImageRequest = Body(...),
    provider: ImageGenerationProvider = Depends(get_provider),
):
    """Compose one request for the selected mode and return the provider reply as-is."""
    result = submit_generation(provider, body.mode, body.to_inputs())
    if not result.ok:
        return error_response(result.error)
    return EditImageSuccess(success=True, response=result.reply.body)


@router.post("/variations", response_model=VariationsOut)
def create_variations(
    body: EditImageRequest = Body(...),
    provider: ImageGenerationProvider = Depends(get_provider),
):
    """Same request as /edit-image, normalized into ordered variations."""
    result = generate_variations(provider, body.mode, body.to_inputs())
    if not result.ok:
        return error_response(result.error)
    return VariationsOut(variations=[VariationOut.from_variation(v) for v in result.variations])


@router.get("/edit-image", response_model=ApiStatusOut)
def edit_image_status() -> ApiStatusOut:
    """Health of the edit API: active model and whether a credential is configured."""
    return ApiStatusOut(
        status="API動作中",
        model=settings.active_model(),
        provider=settings.image_provider,
        has_api_key=bool(settings.active_api_key()),
    )
