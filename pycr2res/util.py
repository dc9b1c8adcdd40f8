# -*- coding: utf-8 -*-
"""
Collection of various useful and/or reoccuring functions across pycr2res
"""

import logging
import os

import numpy as np
from scipy.ndimage import find_objects, label, median_filter

from . import __version__
from .errors import InvalidInput, NotFound

logger = logging.getLogger(__name__)


def log_version():
    """For Debug purposes"""
    logger.debug("----------------------")
    logger.debug("pycr2res version: %s", __version__)


def start_logging(log_file="log.log"):
    """Start logging to log file and command line

    Parameters
    ----------
    log_file : str, optional
        name of the logging file (default: "log.log")
    """

    dirname = os.path.dirname(log_file)
    if dirname != "":
        os.makedirs(dirname, exist_ok=True)

    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format="%(asctime)-15s - %(levelname)s - %(name)-8s - %(message)s",
    )
    logging.captureWarnings(True)
    log_version()


def vector_get_int(vector):
    """Integer part of every element, rounded towards zero"""
    vector = np.asarray(vector, dtype=float)
    return np.trunc(vector).astype(int)


def vector_get_rest(vector):
    """Fractional part of every element, i.e. vector - vector_get_int(vector)"""
    vector = np.asarray(vector, dtype=float)
    return vector - np.trunc(vector)


def threshold_spec(signal, smooth, thresh):
    """Compare a spectrum to its running median

    The median window has the half width smooth // 2 + 1, i.e. the window
    is smooth + 3 pixels wide for even values of smooth and smooth + 2
    for odd ones. At the borders the spectrum is extended by repeating
    the first and last value.

    Parameters
    ----------
    signal : array[n]
        input spectrum
    smooth : int
        size parameter of the median window
    thresh : float
        threshold above the running median

    Returns
    -------
    result : array[n]
        signal - median(signal) - thresh, positive values are more than
        thresh above the local baseline
    """
    signal = np.asarray(signal, dtype=float)
    if signal.ndim != 1 or signal.size == 0:
        raise InvalidInput(f"Expected a non-empty 1D spectrum, got shape {signal.shape}")
    smooth = int(smooth)
    if smooth < 0:
        raise InvalidInput(f"Expected smooth >= 0, but got {smooth}")

    half_width = smooth // 2 + 1
    baseline = median_filter(signal, size=2 * half_width + 1, mode="nearest")
    return signal - baseline - thresh


def find_above_threshold(signal, smooth, thresh):
    """Find the regions of a spectrum that are above the running median

    Parameters
    ----------
    signal : array[n]
        input spectrum
    smooth : int
        size parameter of the median window, see threshold_spec
    thresh : float
        threshold above the running median

    Returns
    -------
    regions : list(tuple(int, int))
        start (inclusive) and stop (exclusive) index of each region

    Raises
    ------
    NotFound
        if no sample is above the threshold
    """
    above = threshold_spec(signal, smooth, thresh) > 0
    regions, nregions = label(above)
    if nregions == 0:
        raise NotFound(f"No sample is more than {thresh} above the running median")

    regions = [(s[0].start, s[0].stop) for s in find_objects(regions)]
    logger.debug("Found %i regions above threshold", nregions)
    return regions
