# -*- coding: utf-8 -*-
"""
Reduction of a single detector image in memory

Chains the noise model, the order tracing, the extraction of all traces,
and the detection of features in the extracted spectra, with the
parameters taken from a configuration (see configuration.py).
Loading and saving of the data is left to the caller.
"""

import logging

import numpy as np

from . import configuration
from .detector import detector_shotnoise_model
from .errors import NotFound
from .extract import extract_traces
from .trace import trace
from .util import find_above_threshold

logger = logging.getLogger(__name__)


def reduce_detector(img, config=None, trace_wave=None):
    """Reduce one (calibrated) detector image

    Parameters
    ----------
    img : array[nrow, ncol]
        bias and dark corrected image in ADU
    config : dict, str, optional
        configuration, passed to configuration.load_config (default: None)
    trace_wave : Table, optional
        known traces. If None the traces are found in img (default: None)

    Returns
    -------
    result : dict
        "err": error image,
        "trace_wave": trace table,
        "spectra": extracted spectra, see extract.extract_traces,
        "model": model image of all traces,
        "features": regions above threshold for each (order, trace_nb)
    """
    config = configuration.load_config(config)
    img = np.asarray(img, dtype=float)

    logger.info("Create the associated Noise image")
    det = config["detector"]
    err = detector_shotnoise_model(img, det["gain"], det["ron"])

    if trace_wave is None:
        logger.info("Compute the traces")
        tr = config["trace"]
        trace_wave = trace(
            img,
            tr["min_cluster"],
            degree=tr["degree"],
            smooth=tr["smooth"],
            ordersep=tr["ordersep"],
            noise=tr["noise"],
            opening=tr["opening"],
            connectivity=tr["connectivity"],
        )

    logger.info("Extract the traces")
    spectra, model = extract_traces(
        img, trace_wave, height=config["extract"]["height"], err=err
    )

    th = config["threshold"]
    features = {}
    for key, value in spectra.items():
        try:
            features[key] = find_above_threshold(
                value["spectrum"], th["smooth"], th["thresh"]
            )
        except NotFound:
            logger.debug("No features in Order %i / Trace %i", *key)
            features[key] = []

    return {
        "err": err,
        "trace_wave": trace_wave,
        "spectra": spectra,
        "model": model,
        "features": features,
    }
