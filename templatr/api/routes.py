"""
FastAPI endpoints for layout, thumbnails, downloads and deck export.
"""
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import Response

from templatr.exceptions import ImageDecodeError, TemplateCardinalityError
from templatr.models.geometry import Placement
from templatr.models.requests import AutoFitRequest, DeckExportRequest, DownloadRequest, ThumbnailRequest
from templatr.services.auto_fit import compute_auto_fit_placement
from templatr.services.slide_exporter import PPTX_CONTENT_TYPE
from templatr.services.template_renderer import TemplateRenderer
from templatr.utils.threading import run_in_threadpool

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["templates"])


def get_renderer(request: Request) -> TemplateRenderer:
    return request.app.state.renderer


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/layout/auto-fit", response_model=Placement)
async def auto_fit_endpoint(request: AutoFitRequest = Body(...)) -> Placement:
    """Default placement of a question image inside a container."""
    return compute_auto_fit_placement(
        request.natural,
        request.container,
        coverage=(request.coverage_x, request.coverage_y),
        padding=request.padding,
    )


@router.post("/templates/thumbnail")
async def thumbnail_endpoint(
    request: ThumbnailRequest = Body(...),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> Response:
    """400x225 JPEG preview with the default layout."""
    try:
        result = await run_in_threadpool(
            None, renderer.render_thumbnail, request.background_url, request.question_url
        )
    except ImageDecodeError as e:
        logger.error(f"Error generating thumbnail: {e}")
        raise HTTPException(status_code=404, detail="Thumbnail not available")
    except Exception as e:
        logger.error(f"Error in thumbnail_endpoint: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return Response(
        content=result.data,
        media_type=result.content_type,
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.post("/templates/download")
async def download_endpoint(
    request: DownloadRequest = Body(...),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> Response:
    """Full-resolution composite as a file attachment."""
    try:
        result = await run_in_threadpool(None, renderer.render_download, request.to_pair(), request.format)
    except ImageDecodeError as e:
        logger.error(f"Error downloading template '{request.name}': {e}")
        raise HTTPException(status_code=404, detail="Template image not available")
    except Exception as e:
        logger.error(f"Error in download_endpoint: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    extension = "png" if request.format == "png" else "jpg"
    return Response(
        content=result.data,
        media_type=result.content_type,
        headers={"Content-Disposition": f'attachment; filename="{request.name}.{extension}"'},
    )


@router.post("/templates/download-pptx")
async def download_pptx_endpoint(
    request: DeckExportRequest = Body(...),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> Response:
    """Multi-template deck with separately editable background and question pictures."""
    try:
        pairs = request.to_pairs()
    except TemplateCardinalityError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not pairs:
        raise HTTPException(status_code=400, detail="At least one slide is required")

    try:
        result = await run_in_threadpool(None, renderer.render_deck, pairs)
    except Exception as e:
        logger.error(f"Error generating PPTX: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    file_name = request.file_name or "templates"
    return Response(
        content=result.data,
        media_type=PPTX_CONTENT_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{file_name}.pptx"',
            "X-Slide-Count": str(result.slide_count),
            "X-Skipped-Count": str(len(result.skipped)),
        },
    )
