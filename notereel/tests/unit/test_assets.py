"""
Unit tests for renderer/assets.py.

No ffmpeg required.  Randomness is injected: a seeded random.Random, or a
stub whose choice() always returns a fixed index.
"""
from __future__ import annotations

import random
from pathlib import Path

import pytest

from renderer.assets import (
    AUDIO_EXTENSIONS,
    BACKGROUND_EXTENSIONS,
    AssetResolver,
    MissingBackgroundAsset,
    is_video,
    list_candidates,
)


class _PickLast(random.Random):
    """choice() always returns the last candidate."""

    def choice(self, seq):
        return seq[-1]


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x")
    return path


class TestListCandidates:

    def test_extension_filter_is_case_insensitive(self, tmp_path: Path):
        for name in ("A.PNG", "b.jpeg", "c.Mp4", "d.webm", "e.mov", "f.jpg", "g.gif", "h.txt"):
            _touch(tmp_path / name)
        names = [p.name for p in list_candidates(tmp_path, BACKGROUND_EXTENSIONS)]
        assert names == ["A.PNG", "b.jpeg", "c.Mp4", "d.webm", "e.mov", "f.jpg"]

    def test_subdirectories_ignored(self, tmp_path: Path):
        (tmp_path / "nested.png").mkdir()
        _touch(tmp_path / "real.png")
        assert list_candidates(tmp_path, BACKGROUND_EXTENSIONS) == [tmp_path / "real.png"]

    def test_missing_directory_is_empty(self, tmp_path: Path):
        assert list_candidates(tmp_path / "nope", AUDIO_EXTENSIONS) == []


class TestBackground:

    def test_explicit_ref_that_exists(self, tmp_path: Path):
        bg_dir = tmp_path / "assets" / "bg"
        beach = _touch(bg_dir / "beach.png")
        _touch(bg_dir / "other.png")
        resolver = AssetResolver(bg_dir, tmp_path / "bgm", rng=_PickLast())
        assert resolver.background("beach.png") == beach

    def test_missing_ref_falls_back_to_random(self, tmp_path: Path):
        bg_dir = tmp_path / "bg"
        _touch(bg_dir / "a.png")
        last = _touch(bg_dir / "z.mov")
        resolver = AssetResolver(bg_dir, tmp_path / "bgm", rng=_PickLast())
        assert resolver.background("beach.png") == last

    def test_no_ref_random_pick(self, tmp_path: Path):
        bg_dir = tmp_path / "bg"
        first = _touch(bg_dir / "a.png")
        resolver = AssetResolver(bg_dir, tmp_path / "bgm", rng=random.Random(1))
        assert resolver.background(None) == first

    def test_seeded_pick_is_reproducible(self, tmp_path: Path):
        bg_dir = tmp_path / "bg"
        for name in ("a.png", "b.png", "c.png", "d.png"):
            _touch(bg_dir / name)
        picks_a = [AssetResolver(bg_dir, tmp_path, rng=random.Random(42)).background() for _ in range(3)]
        picks_b = [AssetResolver(bg_dir, tmp_path, rng=random.Random(42)).background() for _ in range(3)]
        assert picks_a == picks_b

    def test_no_candidates_raises(self, tmp_path: Path):
        bg_dir = tmp_path / "bg"
        _touch(bg_dir / "readme.txt")
        resolver = AssetResolver(bg_dir, tmp_path / "bgm")
        with pytest.raises(MissingBackgroundAsset, match="No background in"):
            resolver.background("beach.png")

    def test_missing_directory_raises(self, tmp_path: Path):
        resolver = AssetResolver(tmp_path / "nope", tmp_path / "bgm")
        with pytest.raises(MissingBackgroundAsset):
            resolver.background()


class TestAudio:

    def test_explicit_ref(self, tmp_path: Path):
        track = _touch(tmp_path / "bgm" / "calm.mp3")
        _touch(tmp_path / "bgm" / "loud.wav")
        resolver = AssetResolver(tmp_path / "bg", tmp_path / "bgm", rng=_PickLast())
        assert resolver.audio("calm.mp3") == track

    def test_random_restricted_to_audio_extensions(self, tmp_path: Path):
        _touch(tmp_path / "bgm" / "cover.png")
        track = _touch(tmp_path / "bgm" / "song.WAV")
        resolver = AssetResolver(tmp_path / "bg", tmp_path / "bgm", rng=_PickLast())
        assert resolver.audio(None) == track

    def test_absent_music_is_none(self, tmp_path: Path):
        resolver = AssetResolver(tmp_path / "bg", tmp_path / "bgm")
        assert resolver.audio("missing.mp3") is None
        assert resolver.audio(None) is None


@pytest.mark.parametrize(
    "name, expected",
    [("clip.MP4", True), ("clip.mov", True), ("clip.webm", True), ("still.png", False), ("still.JPEG", False)],
)
def test_is_video(name, expected):
    assert is_video(Path(name)) is expected
