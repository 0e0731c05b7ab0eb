"""Tests for the built-in notification cues and how the audio player picks them.

Covers: tt.util.tones, tt.ui.notify_backends.QtAudioPlayer.cue_path
"""

import shutil
import tempfile
import unittest
import wave
from pathlib import Path


class TestTones(unittest.TestCase):

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_every_sound_type_has_a_cue(self):
        from tt.core.notifications import SoundType
        from tt.util.tones import CUE_PATTERNS
        self.assertEqual(set(CUE_PATTERNS), {sound.value for sound in SoundType})

    def test_cues_are_distinct(self):
        from tt.util.tones import CUE_PATTERNS, render_pcm
        rendered = {name: render_pcm(pattern) for name, pattern in CUE_PATTERNS.items()}
        self.assertEqual(len(set(rendered.values())), len(rendered))

    def test_rest_renders_silence(self):
        from tt.util.tones import render_pcm
        self.assertEqual(render_pcm([((), 10)], sample_rate=1000), b"\x00\x00" * 10)

    def test_written_wav_is_mono_16_bit(self):
        from tt.util.tones import SAMPLE_RATE, write_wav
        path = write_wav(self.tmpdir / "nested" / "cue.wav", [((440,), 100), ((), 50)])
        with wave.open(str(path), "rb") as wav:
            self.assertEqual(wav.getnchannels(), 1)
            self.assertEqual(wav.getsampwidth(), 2)
            self.assertEqual(wav.getframerate(), SAMPLE_RATE)
            self.assertEqual(wav.getnframes(), int(SAMPLE_RATE * 0.1) + int(SAMPLE_RATE * 0.05))

    def test_ensure_cue_writes_once(self):
        from tt.util.tones import ensure_cue
        path = ensure_cue(self.tmpdir, "big-ben")
        self.assertEqual(path, self.tmpdir / "big-ben.wav")
        path.write_bytes(b"custom")
        self.assertEqual(ensure_cue(self.tmpdir, "big-ben").read_bytes(), b"custom")

    def test_unknown_cue(self):
        from tt.util.tones import ensure_cue
        self.assertIsNone(ensure_cue(self.tmpdir, "kazoo"))
        self.assertEqual(list(self.tmpdir.iterdir()), [])


class TestCuePath(unittest.TestCase):

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.bundled = self.tmpdir / "bundled"
        self.bundled.mkdir()
        self.cache = self.tmpdir / "cache"

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_bundled_file_wins(self):
        from tt.core.notifications import SoundType
        from tt.ui.notify_backends import QtAudioPlayer
        (self.bundled / "work-15.wav").write_bytes(b"RIFF")
        player = QtAudioPlayer(sounds_dir=self.bundled, cache_dir=self.cache)
        self.assertEqual(player.cue_path(SoundType.WORK_15), self.bundled / "work-15.wav")
        self.assertFalse(self.cache.exists())

    def test_missing_file_is_generated(self):
        from tt.core.notifications import SoundType
        from tt.ui.notify_backends import QtAudioPlayer
        player = QtAudioPlayer(sounds_dir=self.bundled, cache_dir=self.cache)
        path = player.cue_path(SoundType.BIG_BEN)
        self.assertEqual(path, self.cache / "big-ben.wav")
        self.assertTrue(path.exists())


if __name__ == "__main__":
    unittest.main()
