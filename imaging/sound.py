"""Pixel-to-audio mapping used by the AsSound filter.

The round trip goes colour → (frequency, amplitude) pairs → additive sine
synthesis → distortion → 16-bit PCM WAV bytes.  The WAV byte stream,
header included, is what gets tiled back over the pixels, which is where
the banding and noise of the effect come from.
"""

from __future__ import annotations

import io
import wave
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

FrequencyRange = Tuple[float, float]

DEFAULT_SAMPLE_RATE: int = 22050
DEFAULT_DURATION: float = 0.1
# Half-open bands in Hz, one per colour channel
DEFAULT_RGB_FREQUENCY_RANGES: Dict[str, FrequencyRange] = {
    "r": (110.0, 440.0),
    "g": (440.0, 1760.0),
    "b": (1760.0, 7040.0),
}
DEFAULT_DRIVE: float = 4.0
DEFAULT_BITS: int = 6

WAV_HEADER_SIZE = 44

# Frequencies are merged into bins of this width before synthesis so large
# selections cost one sinusoid per distinct pitch instead of one per pixel.
_FREQUENCY_RESOLUTION_HZ = 1.0
_SYNTH_CHUNK = 256


def normalize_rgb(rgb: Sequence[int]) -> Tuple[float, float, float]:
    """Map byte channels onto ``[0, 1]``."""

    return rgb[0] / 255, rgb[1] / 255, rgb[2] / 255


def map_frequency(value: float, frequency_range: FrequencyRange) -> float:
    """Map a normalised ``value`` linearly into ``frequency_range``."""

    low, high = frequency_range
    value = min(max(value, 0.0), 1.0)
    return low + value * (high - low)


def map_frequencies(pairs: Iterable[Tuple[float, FrequencyRange]]) -> List[float]:
    """Map each ``(value, range)`` pair to a frequency."""

    return [map_frequency(value, frequency_range) for value, frequency_range in pairs]


def rgb_to_tones(
    rgb: Sequence[int],
    ranges: Optional[Dict[str, FrequencyRange]] = None,
) -> List[Tuple[float, float]]:
    """Return ``(frequency, amplitude)`` for each of the three channels.

    Each channel lands in its own frequency band and its normalised value
    doubles as the amplitude of that partial.
    """

    ranges = ranges or DEFAULT_RGB_FREQUENCY_RANGES
    r, g, b = normalize_rgb(rgb)
    freqs = map_frequencies([(r, ranges["r"]), (g, ranges["g"]), (b, ranges["b"])])
    return list(zip(freqs, (r, g, b)))


def generate_sine_wave(
    frequencies: Sequence[float],
    amplitudes: Sequence[float],
    duration: float = DEFAULT_DURATION,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> Optional[np.ndarray]:
    """Sum one sinusoid per frequency weighted by its amplitude.

    Frequencies are first rounded into 1 Hz bins and partials sharing a bin
    are summed.  The result is normalised by the total amplitude so it
    stays within ``[-1, 1]``; zero total amplitude yields silence.  Returns
    ``None`` only when there are no partials or no samples to render.
    """

    if len(frequencies) != len(amplitudes):
        raise ValueError("frequencies and amplitudes must have the same length")
    num_samples = int(duration * sample_rate)
    if not len(frequencies) or num_samples <= 0:
        return None

    freqs = np.asarray(frequencies, dtype=np.float64)
    amps = np.asarray(amplitudes, dtype=np.float64)
    total = float(np.abs(amps).sum())
    if total == 0.0:
        # Silence still renders: a WAV of zero samples.
        return np.zeros(num_samples, dtype=np.float64)

    bins = np.round(freqs / _FREQUENCY_RESOLUTION_HZ)
    unique_bins, inverse = np.unique(bins, return_inverse=True)
    merged_amps = np.bincount(inverse, weights=amps)
    merged_freqs = unique_bins * _FREQUENCY_RESOLUTION_HZ

    t = np.arange(num_samples, dtype=np.float64) / sample_rate
    samples = np.zeros(num_samples, dtype=np.float64)
    for start in range(0, len(merged_freqs), _SYNTH_CHUNK):
        f = merged_freqs[start:start + _SYNTH_CHUNK, None]
        a = merged_amps[start:start + _SYNTH_CHUNK, None]
        samples += (a * np.sin(2.0 * np.pi * f * t[None, :])).sum(axis=0)
    return samples / total


def apply_distortion(
    samples: np.ndarray,
    drive: float = DEFAULT_DRIVE,
    bits: int = DEFAULT_BITS,
) -> np.ndarray:
    """Overdrive, hard clip and bit-crush ``samples``."""

    if bits < 1:
        raise ValueError("bits must be at least 1")
    driven = np.clip(np.asarray(samples, dtype=np.float64) * drive, -1.0, 1.0)
    levels = float(2 ** (bits - 1))
    return np.round(driven * levels) / levels


def samples_to_wav(samples: np.ndarray, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bytes:
    """Encode ``samples`` as 16-bit mono PCM inside a WAV container."""

    pcm = (np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0) * 32767.0).astype("<i2")
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(sample_rate)
        wf.writeframes(pcm.tobytes())
    return buffer.getvalue()


def tile_bytes(payload: bytes, size: int) -> bytearray:
    """Repeat ``payload`` until it fills ``size`` bytes."""

    if size <= 0:
        return bytearray()
    if not payload:
        raise ValueError("Cannot tile an empty payload")
    repeats, remainder = divmod(size, len(payload))
    return bytearray(payload * repeats + payload[:remainder])


__all__ = [
    "DEFAULT_SAMPLE_RATE",
    "DEFAULT_DURATION",
    "DEFAULT_RGB_FREQUENCY_RANGES",
    "DEFAULT_DRIVE",
    "DEFAULT_BITS",
    "WAV_HEADER_SIZE",
    "normalize_rgb",
    "map_frequency",
    "map_frequencies",
    "rgb_to_tones",
    "generate_sine_wave",
    "apply_distortion",
    "samples_to_wav",
    "tile_bytes",
]
