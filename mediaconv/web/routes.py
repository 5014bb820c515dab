"""HTTP endpoints for media conversion.

Every endpoint takes a multipart upload in the `file` field, runs it through
the transcoding pipeline and returns the encoded bytes as an attachment.
"""

import logging
import time
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from mediaconv.core.config.settings import settings
from mediaconv.core.jobs.service.manager import JobManager
from mediaconv.core.jobs.types import JobType
from mediaconv.features.transcoding.domain.exceptions import MediaConvError, ValidationError
from mediaconv.features.transcoding.domain.models import TranscodeOptions
from mediaconv.features.transcoding.service import presets
from mediaconv.features.transcoding.service.job_handler import TranscodeHandler, TranscodeResult
from mediaconv.web.forms import media_type_for, parse_field, parse_options

logger = logging.getLogger(__name__)

router = APIRouter()

ENDPOINTS = {
    "/convert": "Generic conversion with custom FFmpeg options",
    "/extract-audio": "Extract audio from video (MP3, AAC, WAV)",
    "/compress-video": "Compress video with quality presets",
    "/create-gif": "Convert video to GIF",
    "/thumbnail": "Generate video thumbnail",
}


def get_transcode_handler() -> TranscodeHandler:
    """Dependency to get the transcode handler."""
    return TranscodeHandler()


def get_job_manager() -> JobManager:
    return JobManager()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _attachment(result: TranscodeResult, prefix: str, media_type: str) -> Response:
    filename = f"{prefix}-{int(time.time() * 1000)}.{result.output_format}"
    return Response(
        content=result.content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Job-Id": str(result.job_id),
        },
    )


async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes")
    return data


async def _run_preset(
    handler: TranscodeHandler,
    file: Optional[UploadFile],
    job_type: JobType,
    build_options,
    prefix: str,
    failure_message: str,
) -> Response:
    """Shared flow for the video-only convenience endpoints."""
    if file is None:
        return _error(400, "No file provided")
    if not (file.content_type or "").startswith("video/"):
        return _error(400, "Invalid file type")

    try:
        options: TranscodeOptions = build_options()
        data = await _read_upload(file)
        result = await handler.handle(job_type, data, options)
    except ValidationError as e:
        return _error(400, str(e))
    except MediaConvError as e:
        logger.error(f"{failure_message}: {e}")
        return _error(500, failure_message)

    return _attachment(result, prefix, media_type_for(result.output_format, file.content_type))


@router.get("/")
async def index() -> dict:
    return {"status": "ok", "endpoints": ENDPOINTS}


@router.post("/convert")
async def convert(
    request: Request,
    handler: TranscodeHandler = Depends(get_transcode_handler),
) -> Response:
    """Generic conversion: every recognised option field in the form is applied."""
    form = await request.form()
    file = form.get("file")
    if not hasattr(file, "read"):
        return _error(400, "No file provided")

    try:
        options = parse_options(form)
        data = await _read_upload(file)
        result = await handler.handle(JobType.CONVERT, data, options)
    except ValidationError as e:
        return _error(400, str(e))
    except MediaConvError as e:
        logger.error(f"Conversion failed: {e}")
        return _error(500, "Failed to process media")

    return _attachment(result, "converted", media_type_for(result.output_format, file.content_type))


@router.post("/extract-audio")
async def extract_audio(
    file: Optional[UploadFile] = File(None),
    format: str = Form("mp3"),
    handler: TranscodeHandler = Depends(get_transcode_handler),
) -> Response:
    return await _run_preset(
        handler, file, JobType.EXTRACT_AUDIO,
        lambda: presets.extract_audio(format),
        "audio", "Failed to extract audio",
    )


@router.post("/compress-video")
async def compress_video(
    file: Optional[UploadFile] = File(None),
    quality: str = Form("medium"),
    handler: TranscodeHandler = Depends(get_transcode_handler),
) -> Response:
    return await _run_preset(
        handler, file, JobType.COMPRESS_VIDEO,
        lambda: presets.compress_video(quality),
        "compressed", "Failed to compress video",
    )


@router.post("/create-gif")
async def create_gif(
    file: Optional[UploadFile] = File(None),
    fps: Optional[str] = Form(None),
    handler: TranscodeHandler = Depends(get_transcode_handler),
) -> Response:
    return await _run_preset(
        handler, file, JobType.CREATE_GIF,
        lambda: presets.create_gif(parse_field("fps", fps, float) or 10),
        "animation", "Failed to create GIF",
    )


@router.post("/thumbnail")
async def thumbnail(
    file: Optional[UploadFile] = File(None),
    time_offset: str = Form("00:00:01", alias="time"),
    width: Optional[str] = Form(None),
    height: Optional[str] = Form(None),
    handler: TranscodeHandler = Depends(get_transcode_handler),
) -> Response:
    return await _run_preset(
        handler, file, JobType.THUMBNAIL,
        lambda: presets.thumbnail(
            time_offset,
            width=parse_field("width", width, int),
            height=parse_field("height", height, int),
        ),
        "thumbnail", "Failed to create thumbnail",
    )


@router.get("/jobs/{job_id}")
def get_job(job_id: UUID, jobs: JobManager = Depends(get_job_manager)):
    job = jobs.get_job(job_id)
    if job is None:
        return _error(404, "Job not found")
    return job
