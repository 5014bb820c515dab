"""
Named, pre-built TranscodeOptions for the convenience endpoints.
Pure data construction: nothing here touches the filesystem or the encoder.
"""

from typing import Optional
from ..data.ffmpeg_command import scale_expression
from ..domain.exceptions import ValidationError
from ..domain.models import TranscodeOptions

AUDIO_FORMATS = {
    "mp3": "libmp3lame",
    "aac": "aac",
    "wav": "pcm_s16le",
}

# quality -> (video bitrate, audio bitrate)
COMPRESSION_LEVELS = {
    "low": ("500k", "96k"),
    "medium": ("1000k", "128k"),
    "high": ("2500k", "192k"),
}

GIF_WIDTH = 320


def extract_audio(fmt: str = "mp3") -> TranscodeOptions:
    if fmt not in AUDIO_FORMATS:
        raise ValidationError(f"Unsupported audio format: {fmt}")
    return TranscodeOptions(output_format=fmt, audio_codec=AUDIO_FORMATS[fmt])


def compress_video(quality: str = "medium") -> TranscodeOptions:
    if quality not in COMPRESSION_LEVELS:
        raise ValidationError(f"Unsupported quality: {quality}")
    video_bitrate, audio_bitrate = COMPRESSION_LEVELS[quality]
    return TranscodeOptions(
        output_format="mp4",
        video_codec="libx264",
        audio_codec="aac",
        video_bitrate=video_bitrate,
        audio_bitrate=audio_bitrate,
    )


def create_gif(fps: float = 10) -> TranscodeOptions:
    if fps <= 0:
        raise ValidationError(f"fps must be positive, got {fps}")
    # Palette generated from the clip itself
    palette_chain = (
        f"fps={fps},scale={GIF_WIDTH}:-1:flags=lanczos,"
        "split[s0][s1];[s0]palettegen[p];[s1][p]paletteuse"
    )
    return TranscodeOptions(output_format="gif", filters=(palette_chain,))


def thumbnail(time: str = "00:00:01", width: Optional[int] = None, height: Optional[int] = None) -> TranscodeOptions:
    """
    A single JPEG frame taken at `time`.
    Scaling rides in the same filter chain as the frame pick, since ffmpeg
    refuses a -vf alongside a complex graph feeding the same stream.
    """
    chain = "trim=end_frame=1"
    scale = scale_expression(width, height)
    if scale:
        chain = f"{chain},{scale}"
    return TranscodeOptions(output_format="jpg", start_time=time, filters=(chain,))
