"""AsSound: run the selected pixels through an audio round trip.

Every selected pixel contributes three partials (one per channel, each in
its own frequency band).  The partials are summed into a short sine wave,
distorted, encoded as a WAV file, and the WAV bytes, header included, are
tiled over the region and blended with the current pixels.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from imaging import sound
from imaging.geometry import BoundingBox, Point
from imaging.pixels import clamp_byte

from .. import config
from ..models import AsSoundConfig

LOGGER = logging.getLogger(__name__)


def synthesize(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    duration: float = config.AUDIO_DURATION_SECS,
    sample_rate: int = config.AUDIO_SAMPLE_RATE,
) -> Optional[bytearray]:
    """Return the tiled WAV bytes for the region, or ``None`` if no pixel is coloured."""

    freqs: List[float] = []
    amps: List[float] = []
    for point in points:
        if point.data is None:
            continue
        index = box.local_index(point.x, point.y)
        for frequency, amplitude in sound.rgb_to_tones(data[index:index + 3], config.AUDIO_RGB_FREQUENCY_RANGES):
            freqs.append(frequency)
            amps.append(amplitude)

    samples = sound.generate_sine_wave(freqs, amps, duration, sample_rate)
    if samples is None:
        return None
    wav_bytes = sound.samples_to_wav(
        sound.apply_distortion(samples, config.AUDIO_DISTORTION_DRIVE, config.AUDIO_DISTORTION_BITS),
        sample_rate,
    )
    return sound.tile_bytes(wav_bytes, int(box.width) * int(box.height) * 4)


def apply(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: AsSoundConfig,
    rng: Optional[random.Random] = None,
) -> None:
    glitched = synthesize(data, points, box)
    if glitched is None:
        LOGGER.debug("AsSound skipped: no coloured pixels")
        return

    blend = cfg.blend
    keep = 1 - blend
    for point in points:
        if point.data is None:
            continue
        index = box.local_index(point.x, point.y)
        for channel in range(index, index + 3):
            data[channel] = clamp_byte(data[channel] * keep + glitched[channel] * blend)
