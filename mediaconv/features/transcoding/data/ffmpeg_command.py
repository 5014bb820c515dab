from pathlib import Path
from typing import List, Optional
from mediaconv.core.config.settings import settings
from ..domain.interfaces import ICommandBuilder
from ..domain.models import Invocation, TranscodeOptions

# Output tokens that name a file extension rather than an ffmpeg muxer
MUXER_ALIASES = {
    "jpg": "image2",
    "jpeg": "image2",
    "png": "image2",
    "mkv": "matroska",
    "aac": "adts",
    "m4a": "ipod",
    "ts": "mpegts",
}

# -y: Overwrite the (pre-allocated) output path
# -nostdin: Never wait on the terminal for interactive commands
GLOBAL_ARGS = ("-y", "-nostdin", "-hide_banner")


def scale_expression(width: Optional[int], height: Optional[int]) -> Optional[str]:
    """
    Builds the scale filter for the requested geometry.
    A missing side becomes -2: derived from the aspect ratio, rounded to an even number.
    """
    if width is None and height is None:
        return None
    w = width if width is not None else -2
    h = height if height is not None else -2
    return f"scale={w}:{h}"


class FFmpegCommandBuilder(ICommandBuilder):
    """
    Concrete implementation of ICommandBuilder for the ffmpeg CLI.

    Options are applied in a fixed order (format, codecs, bitrates, frame rate,
    geometry, audio layout, trimming, filter stages) so the same options always
    produce the same argument list. Values are passed through uninterpreted.
    """

    def __init__(self, binary: Optional[str] = None):
        self.binary = binary or settings.FFMPEG_BINARY

    def build(self, input_path: Path, output_path: Path, options: TranscodeOptions) -> Invocation:
        input_args: List[str] = []
        out: List[str] = []

        # 1. Container
        out += ["-f", MUXER_ALIASES.get(options.output_format.lower(), options.output_format)]

        # 2. Codecs
        if options.video_codec:
            out += ["-c:v", options.video_codec]
        if options.audio_codec:
            out += ["-c:a", options.audio_codec]

        # 3. Bitrates
        if options.video_bitrate:
            out += ["-b:v", options.video_bitrate]
        if options.audio_bitrate:
            out += ["-b:a", options.audio_bitrate]

        # 4. Frame rate
        if options.fps is not None:
            out += ["-r", _fmt(options.fps)]

        # 5. Geometry: size, then display aspect
        scale = scale_expression(options.width, options.height)
        if scale:
            out += ["-vf", scale]
        if options.aspect_ratio:
            out += ["-aspect", options.aspect_ratio]

        # 6. Audio layout
        if options.audio_channels is not None:
            out += ["-ac", _fmt(options.audio_channels)]
        if options.audio_frequency is not None:
            out += ["-ar", _fmt(options.audio_frequency)]

        # 7. Trimming
        # start_time seeks the input (fast, keyframe based); seek is applied
        # on the output side and is frame accurate.
        if options.start_time:
            input_args += ["-ss", options.start_time]
        if options.duration:
            out += ["-t", options.duration]
        if options.seek:
            out += ["-ss", options.seek]

        # 8. Filter graph stages, caller order
        for expression in options.filters:
            out += ["-filter_complex", expression]

        return Invocation(
            binary=self.binary,
            input_path=input_path,
            output_path=output_path,
            global_args=GLOBAL_ARGS,
            input_args=tuple(input_args),
            output_args=tuple(out),
        )


def _fmt(value) -> str:
    # 30.0 -> "30", 29.97 -> "29.97"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
