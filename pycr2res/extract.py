# -*- coding: utf-8 -*-
"""
Simple sum extraction of the traces

For each trace the image is rectified along the trace center and the
strip is summed over its rows. The model image (slit function times
spectrum) is put back into the detector geometry.
"""

import logging

import numpy as np
from tqdm import tqdm

from .errors import Cr2resError, NotFound
from .rectify import cut_rectify, insert_rect
from .trace_table import (
    COL_ORDER,
    COL_TRACENB,
    trace_get_height,
    trace_get_ycen,
    validate_trace_table,
)

logger = logging.getLogger(__name__)


def extract_sum_vert(img, trace_wave, order, trace_nb, height=None, err=None):
    """Extract one trace by summing the rectified strip along the slit

    Parameters
    ----------
    img : array[nrow, ncol]
        image to extract
    trace_wave : Table
        trace table
    order : int
        order number of the trace
    trace_nb : int
        trace number
    height : int, optional
        extraction height in pixels (default: None, the distance between
        the upper and lower edge of the trace)
    err : array[nrow, ncol], optional
        uncertainties of img (default: None)

    Returns
    -------
    slit_func : array[height]
        normalized slit function
    spectrum : array[ncol]
        extracted spectrum
    spectrum_err : array[ncol]
        uncertainty of the spectrum, zero if err is None
    model : array[nrow, ncol]
        slit function times spectrum, in the detector geometry
    """
    img = np.asarray(img, dtype=float)
    nrow, ncol = img.shape

    ycen = trace_get_ycen(trace_wave, order, trace_nb, ncol)
    if height is None:
        height = trace_get_height(trace_wave, order, trace_nb, ncol)

    strip = cut_rectify(img, ycen, height)
    spectrum = np.sum(strip, axis=0)

    if err is not None:
        err_strip = cut_rectify(err, ycen, height)
        spectrum_err = np.sqrt(np.sum(err_strip ** 2, axis=0))
    else:
        spectrum_err = np.zeros(ncol)

    slit_func = np.sum(strip, axis=1)
    total = np.sum(slit_func)
    if total != 0:
        slit_func = slit_func / total
    else:
        logger.warning("Order %i / Trace %i has no flux", order, trace_nb)

    model = np.zeros((nrow, ncol))
    insert_rect(slit_func[:, None] * spectrum[None, :], ycen, model)

    return slit_func, spectrum, spectrum_err, model


def extract_traces(
    img, trace_wave, height=None, err=None, reduce_order=-1, reduce_trace=-1
):
    """Extract all traces of a table

    Traces that fail are skipped with a warning.

    Parameters
    ----------
    img : array[nrow, ncol]
        image to extract
    trace_wave : Table
        trace table
    height : int, optional
        extraction height, see extract_sum_vert (default: None)
    err : array[nrow, ncol], optional
        uncertainties of img (default: None)
    reduce_order : int, optional
        only extract this order, -1 for all orders (default: -1)
    reduce_trace : int, optional
        only extract this trace number, -1 for all traces (default: -1)

    Returns
    -------
    spectra : dict((int, int), dict)
        results for each (order, trace_nb) with the keys
        "slit_func", "spectrum", and "error"
    model : array[nrow, ncol]
        sum of the models of all extracted traces

    Raises
    ------
    NotFound
        if no trace could be extracted
    """
    validate_trace_table(trace_wave)
    img = np.asarray(img, dtype=float)
    model = np.zeros(img.shape)
    spectra = {}

    for row in tqdm(trace_wave, desc="Trace"):
        order, trace_nb = int(row[COL_ORDER]), int(row[COL_TRACENB])
        if reduce_order > -1 and order != reduce_order:
            continue
        if reduce_trace > -1 and trace_nb != reduce_trace:
            continue

        logger.debug("Process Order %i / Trace %i", order, trace_nb)
        try:
            slit_func, spec, spec_err, model_trace = extract_sum_vert(
                img, trace_wave, order, trace_nb, height=height, err=err
            )
        except Cr2resError as ex:
            logger.warning("Cannot extract Order %i / Trace %i: %s", order, trace_nb, ex)
            continue

        model += model_trace
        spectra[(order, trace_nb)] = {
            "slit_func": slit_func,
            "spectrum": spec,
            "error": spec_err,
        }

    if len(spectra) == 0:
        raise NotFound("No trace could be extracted")
    return spectra, model
