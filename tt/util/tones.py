"""Built-in notification cues, synthesized as small mono 16-bit WAV files.

Each cue is a list of (frequencies, duration_ms) steps. An empty frequency
tuple is a rest, several frequencies are mixed into one chord. Cues are
keyed by the SoundType value they stand in for.
"""

import math
import wave
from pathlib import Path
from tt.common.logger import log

SAMPLE_RATE = 22050
_AMPLITUDE = 0.8 * 32767

CUE_PATTERNS = {
    # Rising arpeggio, task done
    "work-complete": [((523,), 140), ((659,), 140), ((784,), 140), ((1047,), 420)],
    # Four slow low chimes on the hour
    "big-ben": [((330,), 450), ((262,), 450), ((294,), 450), ((196,), 800)],
    # Two short high blips every quarter hour
    "work-15": [((1319,), 110), ((), 90), ((1319,), 110)],
    "pomodoro-start": [((880,), 220)],
    # Falling pair of chords
    "pomodoro-complete": [((988, 784), 260), ((), 60), ((659, 523), 420)],
}


def render_pcm(pattern, sample_rate=SAMPLE_RATE):
    """Render a cue to little-endian 16-bit PCM. Every tone gets a raised-cosine envelope, so no clicks."""
    frames = bytearray()
    for freqs, duration_ms in pattern:
        samples = max(int(sample_rate * duration_ms / 1000), 1)
        if not freqs:
            frames.extend(b"\x00\x00" * samples)
            continue
        for n in range(samples):
            t = n / sample_rate
            envelope = 0.5 - 0.5 * math.cos(2 * math.pi * n / samples)
            sample = sum(math.sin(2 * math.pi * freq * t) for freq in freqs) / len(freqs)
            frames.extend(int(_AMPLITUDE * envelope * sample).to_bytes(2, "little", signed=True))
    return bytes(frames)

def write_wav(path, pattern, sample_rate=SAMPLE_RATE):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(render_pcm(pattern, sample_rate))
    return path

# Path of the generated cue for `name`, writing it on first use. None for a name without a pattern.
def ensure_cue(directory, name):
    pattern = CUE_PATTERNS.get(name)
    if pattern is None:
        return None
    path = Path(directory) / f"{name}.wav"
    if not path.exists():
        write_wav(path, pattern)
        log.info(f"Generated notification cue '{name}' at '{path}'")
    return path
