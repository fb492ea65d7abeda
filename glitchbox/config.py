# config.py
"""
Application configuration constants for Glitchbox
"""

# Filter defaults
AS_SOUND_BLEND = 0.50
FRACTAL_PIXEL_SORT_INTENSITY = 6.0
BRIGHTNESS_INTENSITY = 1.0
TINT_COLOR = (255, 255, 255)
GRAYSCALE_INTENSITY = 1.0
DUOTONE_HIGHLIGHTS_COLOR = "#6aff7f"
DUOTONE_SHADOWS_COLOR = "#00007e"
DUOTONE_BRIGHTNESS = 1.0

# Fractal pixel sort shift distances never start closer than this
PIXEL_SORT_MIN_SHIFT = 10

# Audio mapping settings
AUDIO_SAMPLE_RATE = 22050
AUDIO_DURATION_SECS = 0.1
AUDIO_DISTORTION_DRIVE = 4.0
AUDIO_DISTORTION_BITS = 6
# Half-open frequency bands in Hz, one per colour channel
AUDIO_RGB_FREQUENCY_RANGES = {
    "r": (110.0, 440.0),
    "g": (440.0, 1760.0),
    "b": (1760.0, 7040.0),
}

# History settings
HISTORY_LIMIT = None  # None keeps every snapshot

# Supported image formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']
EXPORT_FORMATS = ['png', 'gif']

# Image dimension limits
MAX_IMAGE_DIMENSION = 4000       # Maximum width/height for loaded images

# GIF export settings
GIF_FRAME_COUNT = 12
GIF_FRAMERATE = 15
GIF_COLOR_RANGE = 80
GIF_COMPRESSION_QUALITY = 0
GIF_COLOR_RANGE_LIMITS = (2, 256)
GIF_FRAMERATE_LIMITS = (1, 60)

# Export retry settings
EXPORT_MAX_RETRIES = 3
EXPORT_INITIAL_BACKOFF_MS = 100
EXPORT_FILENAME_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Logging settings
LOG_FILENAME = "glitchbox.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
