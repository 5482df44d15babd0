"""Plot-ready projection of the signal bundle onto the active channel.

These functions are used exclusively for visualization; they never modify
the bundle and are recomputed on every state change rather than cached.
"""
from __future__ import annotations

import numpy as np
from loguru import logger

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cardio_dashboard.core import SignalBundle

from cardio_dashboard.core.data_models import ActiveChannel, SignalPoint


def project(bundle: SignalBundle | None, channel: ActiveChannel) -> tuple[SignalPoint, ...]:
    """Pair every time sample with the active channel's amplitude.

    Args:
        bundle: Current signal bundle, or None before the first generation
        channel: Channel selected by the Normal/Abnormal tab

    Returns:
        Ordered tuple of SignalPoint, one per time sample. Empty if bundle is None.
    """
    if bundle is None:
        return ()

    amplitudes = bundle.amplitudes(channel)
    points = tuple(
        SignalPoint(time=float(t), amplitude=float(a))
        for t, a in zip(bundle.time.tolist(), amplitudes.tolist())
    )
    logger.debug(f"project: {len(points)} points on {channel.value} channel")
    return points


def project_arrays(bundle: SignalBundle | None, channel: ActiveChannel) -> tuple[np.ndarray, np.ndarray]:
    """Array form of project() for the plot widget.

    Returns:
        Tuple of (times, amplitudes) as fresh writeable copies; both empty
        if bundle is None.
    """
    if bundle is None:
        return np.array([]), np.array([])
    return bundle.time.copy(), bundle.amplitudes(channel).copy()
