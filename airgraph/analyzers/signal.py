"""
Airgraph Signal Summary
========================

Signal-strength helpers over a node's bounded signal history: quality
classification of a single RSSI reading and descriptive statistics of
the retained samples.

A reading of exactly 0 dBm is how frames without a RadioTap signal
field are recorded; such samples are excluded from statistics.

References:
    - Cisco. (2024). Wireless LAN Design Guide. Signal Strength
      Recommendations.
"""

from __future__ import annotations

import enum
from typing import Iterable, Optional

import numpy as np
from pydantic import BaseModel

NO_READING = 0


class SignalQuality(str, enum.Enum):
    """RSSI-based signal quality classification."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    WEAK = "Weak"
    VERY_WEAK = "Very Weak"


class SignalSummary(BaseModel):
    """Descriptive statistics of a signal history.

    Attributes:
        samples: Number of usable readings.
        mean_dbm: Arithmetic mean in dBm.
        min_dbm: Weakest reading.
        max_dbm: Strongest reading.
        std_dbm: Population standard deviation.
        quality: Quality class of the mean.
    """

    samples: int = 0
    mean_dbm: Optional[float] = None
    min_dbm: Optional[int] = None
    max_dbm: Optional[int] = None
    std_dbm: Optional[float] = None
    quality: Optional[SignalQuality] = None


def classify_signal_quality(rssi_dbm: float) -> SignalQuality:
    """Classify WiFi signal strength into quality categories.

    Classification:
        Excellent:  > -50 dBm
        Good:       -50 to -60 dBm
        Fair:       -60 to -70 dBm
        Weak:       -70 to -80 dBm
        Very Weak:  < -80 dBm

    Args:
        rssi_dbm: Received signal strength in dBm.

    Returns:
        Signal quality classification.
    """
    if rssi_dbm > -50:
        return SignalQuality.EXCELLENT
    elif rssi_dbm > -60:
        return SignalQuality.GOOD
    elif rssi_dbm > -70:
        return SignalQuality.FAIR
    elif rssi_dbm > -80:
        return SignalQuality.WEAK
    else:
        return SignalQuality.VERY_WEAK


def summarize_signal(history: Iterable[int]) -> SignalSummary:
    """Compute mean / min / max / std over usable readings in *history*."""
    values = np.array(
        [v for v in history if v != NO_READING], dtype=np.float64
    )
    if values.size == 0:
        return SignalSummary()

    mean = float(np.mean(values))
    return SignalSummary(
        samples=int(values.size),
        mean_dbm=round(mean, 2),
        min_dbm=int(np.min(values)),
        max_dbm=int(np.max(values)),
        std_dbm=round(float(np.std(values)), 2),
        quality=classify_signal_quality(mean),
    )
