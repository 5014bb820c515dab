import asyncio
import json
import shutil
import subprocess
import pytest
from mediaconv.features.transcoding.domain.exceptions import ProcessingError
from mediaconv.features.transcoding.domain.models import TranscodeOptions
from mediaconv.features.transcoding.service.api import extract_audio_from_video, transcode, transcode_file

pytestmark = pytest.mark.skipif(shutil.which("ffprobe") is None, reason="ffmpeg/ffprobe not installed")


def _probe(path) -> dict:
    result = subprocess.run(
        ["ffprobe", "-v", "error", "-show_format", "-show_streams", "-of", "json", str(path)],
        capture_output=True, text=True, check=True,
    )
    return json.loads(result.stdout)


def _looks_like_mp3(data: bytes) -> bool:
    # ID3 tag, or a bare MPEG audio frame sync
    return data[:3] == b"ID3" or (data[0] == 0xFF and (data[1] & 0xE0) == 0xE0)


def test_video_to_mp3_round_trip(synthetic_video, staging_dir, tmp_path):
    """
    Integration Test:
    10 seconds of video in, a valid MP3 out, nothing left in staging.
    """
    before = set(staging_dir.iterdir())

    output = asyncio.run(transcode(
        synthetic_video.read_bytes(),
        TranscodeOptions(output_format="mp3", audio_codec="libmp3lame"),
    ))

    assert len(output) > 0
    assert _looks_like_mp3(output)
    assert set(staging_dir.iterdir()) == before

    out_file = tmp_path / "out.mp3"
    out_file.write_bytes(output)
    probe = _probe(out_file)
    assert probe["format"]["format_name"] == "mp3"
    assert 9.5 <= float(probe["format"]["duration"]) <= 10.5


def test_extract_audio_from_video(synthetic_video, staging_dir):
    before = set(staging_dir.iterdir())

    output = asyncio.run(extract_audio_from_video(synthetic_video.read_bytes()))

    assert _looks_like_mp3(output)
    assert set(staging_dir.iterdir()) == before


def test_unknown_codec_fails_and_cleans_up(synthetic_video, staging_dir):
    before = set(staging_dir.iterdir())

    with pytest.raises(ProcessingError) as exc_info:
        asyncio.run(transcode(
            synthetic_video.read_bytes(),
            TranscodeOptions(output_format="mp4", video_codec="not-a-real-codec"),
        ))

    assert exc_info.value.cause.strip()
    assert "not-a-real-codec" in exc_info.value.cause
    assert set(staging_dir.iterdir()) == before


def test_width_only_keeps_aspect_ratio(synthetic_video, tmp_path):
    dest = tmp_path / "small.mp4"

    transcode_file(
        str(synthetic_video), str(dest),
        TranscodeOptions(output_format="mp4", video_codec="libx264", width=320, duration="2"),
    )

    video = next(s for s in _probe(dest)["streams"] if s["codec_type"] == "video")
    assert (video["width"], video["height"]) == (320, 180)


def test_trim_and_filters(synthetic_video, tmp_path):
    dest = tmp_path / "trimmed.mp4"

    transcode_file(
        str(synthetic_video), str(dest),
        TranscodeOptions(
            output_format="mp4", video_codec="libx264", audio_codec="aac",
            start_time="2", duration="3", filters=("hflip",),
        ),
    )

    duration = float(_probe(dest)["format"]["duration"])
    assert 2.8 <= duration <= 3.2
