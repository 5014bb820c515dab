import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Optional
from ..domain.exceptions import ValidationError
from ..domain.models import TranscodeOptions
from .pipeline import TranscodePipeline
from . import presets

# Stateless; shared by all requests
pipeline = TranscodePipeline()


def validate_options(options: TranscodeOptions) -> TranscodeOptions:
    """
    Boundary check, run before anything is staged.
    The pipeline itself accepts any combination of fields.
    """
    if not options.output_format or not str(options.output_format).strip():
        raise ValidationError("Output format is required")
    return options


async def transcode(input_bytes: bytes, options: TranscodeOptions, timeout: Optional[float] = None) -> bytes:
    """
    Public Service API: Transcode an in-memory media payload.

    Raises:
        ValidationError: options are missing an output format.
        StagingError / ProcessingError: see TranscodePipeline.process.
    """
    validate_options(options)
    return await pipeline.process(input_bytes, options, timeout=timeout)


async def extract_audio_from_video(video_bytes: bytes) -> bytes:
    """MP4 in, MP3 (libmp3lame) out."""
    return await transcode(video_bytes, presets.extract_audio("mp3"))


def transcode_file(source_path: str, dest_path: str, options: TranscodeOptions) -> Path:
    """
    Standalone API: Transcode a file on disk to `dest_path`.
    For scripts; does NOT interact with the job ledger.
    """
    source = Path(source_path)
    if not source.exists():
        raise FileNotFoundError(f"Media file not found: {source}")

    # Stage under the real extension unless told otherwise
    if options.input_format is None and source.suffix:
        options = replace(options, input_format=source.suffix.lstrip("."))

    output = asyncio.run(transcode(source.read_bytes(), options))

    dest = Path(dest_path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(output)
    return dest
