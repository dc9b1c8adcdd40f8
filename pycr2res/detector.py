# -*- coding: utf-8 -*-
"""
Noise model of the detector

Converts pixel counts into the expected uncertainty of each pixel,
from the photon statistics and the read out noise.
"""

import logging

import numpy as np

from .errors import InvalidInput

logger = logging.getLogger(__name__)


def detector_shotnoise_model(ima_data, gain, ron):
    """Compute the photon count error in ADU

    The data must contain the photon counts without offsets, i.e. it must
    be bias (and overscan) corrected. The shot noise is then the poissonian
    error sqrt(counts) of the electrons, transformed back into ADU, and the
    read out noise is added in quadrature

        err = sqrt(counts / gain + ron**2)

    If a pixel value is negative the error is set to the read out noise.

    Parameters
    ----------
    ima_data : array[nrow, ncol]
        image in ADU
    gain : float
        detector gain in e- / ADU
    ron : float
        read out noise in ADU

    Returns
    -------
    ima_errs : array[nrow, ncol]
        error image in ADU

    Raises
    ------
    InvalidInput
        if gain is not positive or ron is negative
    """
    if not gain > 0:
        raise InvalidInput(f"Expected a positive gain, but got {gain}")
    if not ron >= 0:
        raise InvalidInput(f"Expected a non-negative read out noise, but got {ron}")

    ima_data = np.asarray(ima_data, dtype=float)
    ima_errs = np.full(ima_data.shape, float(ron))
    positive = ima_data >= 0
    ima_errs[positive] = np.sqrt(ima_data[positive] / gain + ron ** 2)

    logger.debug("Noise image: gain %g e-/ADU, read out noise %g ADU", gain, ron)
    return ima_errs
