import pytest
from starlette.datastructures import FormData
from mediaconv.features.transcoding.domain.exceptions import ValidationError
from mediaconv.features.transcoding.domain.models import TranscodeOptions
from mediaconv.web.forms import media_type_for, parse_field, parse_options


def test_recognised_fields_are_typed():
    form = FormData([
        ("outputFormat", "mp4"),
        ("videoCodec", "libx264"),
        ("fps", "29.97"),
        ("width", "320"),
        ("audioChannels", "2"),
        ("startTime", "00:00:02"),
    ])

    assert parse_options(form) == TranscodeOptions(
        output_format="mp4",
        video_codec="libx264",
        fps=29.97,
        width=320,
        audio_channels=2,
        start_time="00:00:02",
    )


def test_unknown_fields_are_ignored():
    form = FormData([("outputFormat", "mp3"), ("overwrite", "yes"), ("__class__", "x")])

    assert parse_options(form) == TranscodeOptions(output_format="mp3")


def test_snake_case_spelling_is_accepted():
    form = FormData([("output_format", "gif"), ("audio_bitrate", "64k")])

    assert parse_options(form) == TranscodeOptions(output_format="gif", audio_bitrate="64k")


def test_repeated_filters_keep_their_order():
    form = FormData([("outputFormat", "mp4"), ("filters", "hflip"), ("filters", "scale=iw/2:-2,negate")])

    assert parse_options(form).filters == ("hflip", "scale=iw/2:-2,negate")


@pytest.mark.parametrize("fields", [[], [("outputFormat", "")], [("outputFormat", "   ")], [("videoCodec", "h264")]])
def test_missing_output_format_is_rejected(fields):
    with pytest.raises(ValidationError, match="Output format is required"):
        parse_options(FormData(fields))


def test_non_numeric_value_is_rejected():
    with pytest.raises(ValidationError, match="width"):
        parse_options(FormData([("outputFormat", "mp4"), ("width", "wide")]))


def test_media_type_for():
    assert media_type_for("mp4") == "video/mp4"
    assert media_type_for("gif") == "image/gif"
    assert media_type_for("jpg") == "image/jpeg"
    assert media_type_for("zzz", "video/quicktime") == "video/zzz"
    assert media_type_for("zzz") == "application/octet-stream"


def test_parse_field_blank_is_none_and_junk_is_rejected():
    assert parse_field("width", None, int) is None
    assert parse_field("width", "  ", int) is None
    assert parse_field("width", " 320 ", int) == 320

    with pytest.raises(ValidationError, match="Invalid value for fps"):
        parse_field("fps", "fast", float)
