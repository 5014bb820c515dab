"""
Translation of free-form multipart fields into TranscodeOptions.

Only the recognised option fields are read; anything else in the form is
ignored here so the pipeline only ever sees the typed model.
"""

import mimetypes
from typing import Callable, Dict, Optional, Tuple
from starlette.datastructures import FormData, UploadFile

from mediaconv.features.transcoding.domain.exceptions import ValidationError
from mediaconv.features.transcoding.domain.models import TranscodeOptions

# form field -> (model field, converter)
_FIELDS: Dict[str, Tuple[str, Callable]] = {
    "inputFormat": ("input_format", str),
    "outputFormat": ("output_format", str),
    "videoCodec": ("video_codec", str),
    "audioCodec": ("audio_codec", str),
    "videoBitrate": ("video_bitrate", str),
    "audioBitrate": ("audio_bitrate", str),
    "fps": ("fps", float),
    "width": ("width", int),
    "height": ("height", int),
    "aspectRatio": ("aspect_ratio", str),
    "audioChannels": ("audio_channels", int),
    "audioFrequency": ("audio_frequency", int),
    "startTime": ("start_time", str),
    "duration": ("duration", str),
    "seek": ("seek", str),
}

# snake_case spellings are accepted too
_FIELDS.update({model_field: (model_field, conv) for model_field, conv in list(_FIELDS.values())})


def parse_field(key: str, raw: Optional[str], convert: Callable = str):
    """Converts one form value; blank or missing values come back as None."""
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    try:
        return convert(raw)
    except ValueError:
        raise ValidationError(f"Invalid value for {key}: {raw!r}")


def parse_options(form: FormData) -> TranscodeOptions:
    """
    Builds TranscodeOptions from a submitted form.

    Raises:
        ValidationError: outputFormat is missing or a numeric field isn't a number.
    """
    values = {}
    for key, raw in form.multi_items():
        if key not in _FIELDS or isinstance(raw, UploadFile):
            continue
        model_field, convert = _FIELDS[key]
        value = parse_field(key, raw, convert)
        if value is not None:
            values[model_field] = value

    filters = tuple(
        f.strip() for f in form.getlist("filters")
        if isinstance(f, str) and f.strip()
    )

    if not values.get("output_format"):
        raise ValidationError("Output format is required")

    return TranscodeOptions(filters=filters, **values)


def media_type_for(output_format: str, upload_type: Optional[str] = None) -> str:
    """
    Content-Type for an encoded payload.
    Falls back to "<upload family>/<format>" (video/webm, audio/ogg...) when the
    extension is unknown to the mimetypes table.
    """
    guessed, _ = mimetypes.guess_type(f"output.{output_format}")
    if guessed:
        return guessed
    if upload_type and "/" in upload_type:
        return f"{upload_type.split('/')[0]}/{output_format}"
    return "application/octet-stream"
