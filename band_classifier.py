# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)

# The RBN feed reports frequency in kHz inside its "frequency" field,
# so values are divided by 1000 to get MHz before the table lookup.

OTHER_BAND = "Other"
ALL_BANDS = "All"

# Ordered band table: (name, low MHz inclusive, high MHz exclusive)
BAND_TABLE = (
    ("160m", 1.8, 2.0),
    ("80m", 3.5, 4.0),
    ("60m", 5.3, 5.4),
    ("40m", 7.0, 7.3),
    ("30m", 10.1, 10.15),
    ("20m", 14.0, 14.35),
    ("17m", 18.068, 18.168),
    ("15m", 21.0, 21.45),
    ("12m", 24.89, 24.99),
    ("10m", 28.0, 29.7),
    ("6m", 50.0, 54.0),
)

BAND_NAMES = tuple(name for name, _, _ in BAND_TABLE)


def classify(frequency_hz):
    """Return the amateur band tag for a feed frequency, or "Other"."""
    f = frequency_hz / 1000
    for name, low, high in BAND_TABLE:
        if low <= f < high:
            return name
    return OTHER_BAND
