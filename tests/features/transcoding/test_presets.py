import pytest
from mediaconv.features.transcoding.domain.exceptions import ValidationError
from mediaconv.features.transcoding.domain.models import TranscodeOptions
from mediaconv.features.transcoding.service import presets


@pytest.mark.parametrize("fmt,codec", [("mp3", "libmp3lame"), ("aac", "aac"), ("wav", "pcm_s16le")])
def test_extract_audio(fmt, codec):
    assert presets.extract_audio(fmt) == TranscodeOptions(output_format=fmt, audio_codec=codec)


def test_extract_audio_rejects_unknown_format():
    with pytest.raises(ValidationError):
        presets.extract_audio("flac")


def test_compress_video_quality_levels():
    low = presets.compress_video("low")
    high = presets.compress_video("high")

    assert low.output_format == high.output_format == "mp4"
    assert low.video_codec == "libx264"
    assert (low.video_bitrate, low.audio_bitrate) == ("500k", "96k")
    assert (high.video_bitrate, high.audio_bitrate) == ("2500k", "192k")

    with pytest.raises(ValidationError):
        presets.compress_video("ultra")


def test_create_gif_builds_palette_chain():
    options = presets.create_gif(12)

    assert options.output_format == "gif"
    assert len(options.filters) == 1
    assert options.filters[0].startswith("fps=12,scale=320:-1")
    assert "palettegen" in options.filters[0]

    with pytest.raises(ValidationError):
        presets.create_gif(0)


def test_thumbnail_defaults():
    options = presets.thumbnail()

    assert options.output_format == "jpg"
    assert options.start_time == "00:00:01"
    assert options.filters == ("trim=end_frame=1",)


def test_thumbnail_partial_geometry_goes_into_the_filter_chain():
    options = presets.thumbnail("00:00:03", width=160)

    assert options.filters == ("trim=end_frame=1,scale=160:-2",)
    assert options.width is None and options.height is None
