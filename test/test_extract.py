import numpy as np
import pytest

from pycr2res.errors import NotFound
from pycr2res.extract import extract_sum_vert, extract_traces
from pycr2res.trace_table import add_trace, new_trace_table

pytestmark = pytest.mark.unit


@pytest.fixture
def image():
    img = np.zeros((20, 10))
    img[9:12] = 1
    return img


@pytest.fixture
def trace_wave():
    table = new_trace_table(3)
    add_trace(table, 1, 1, [11.0], [12.5], [9.5])
    return table


def test_extract_sum_vert(image, trace_wave):
    slit_func, spec, spec_err, model = extract_sum_vert(image, trace_wave, 1, 1)

    assert np.allclose(spec, 3)
    assert np.allclose(slit_func, [1 / 3, 1 / 3, 1 / 3])
    assert np.allclose(spec_err, 0)
    assert np.allclose(model, image)


def test_extract_sum_vert_error(image, trace_wave):
    err = np.ones_like(image)

    _, _, spec_err, _ = extract_sum_vert(image, trace_wave, 1, 1, err=err)

    assert np.allclose(spec_err, np.sqrt(3))


def test_extract_sum_vert_height(image, trace_wave):
    slit_func, spec, _, _ = extract_sum_vert(image, trace_wave, 1, 1, height=5)

    assert slit_func.shape == (5,)
    assert np.allclose(spec, 3)
    assert np.allclose(slit_func, [0, 1 / 3, 1 / 3, 1 / 3, 0])


def test_extract_sum_vert_missing(image, trace_wave):
    with pytest.raises(NotFound):
        extract_sum_vert(image, trace_wave, 2, 1)


def test_extract_traces(image, trace_wave):
    # this trace has no height and is skipped
    add_trace(trace_wave, 2, 1, [5.0], [5.0], [5.0])
    add_trace(trace_wave, 3, 1, [4.0], [5.0], [3.0])

    spectra, model = extract_traces(image, trace_wave)

    assert set(spectra.keys()) == {(1, 1), (3, 1)}
    assert set(spectra[(1, 1)].keys()) == {"slit_func", "spectrum", "error"}
    assert np.allclose(spectra[(1, 1)]["spectrum"], 3)
    assert np.allclose(spectra[(3, 1)]["spectrum"], 0)
    assert np.allclose(model, image)


def test_extract_traces_selection(image, trace_wave):
    add_trace(trace_wave, 3, 1, [4.0], [5.0], [3.0])
    add_trace(trace_wave, 3, 2, [11.0], [12.0], [10.0])

    spectra, _ = extract_traces(image, trace_wave, reduce_order=3)
    assert set(spectra.keys()) == {(3, 1), (3, 2)}

    spectra, _ = extract_traces(image, trace_wave, reduce_trace=2)
    assert set(spectra.keys()) == {(3, 2)}

    spectra, _ = extract_traces(image, trace_wave, reduce_order=1, reduce_trace=1)
    assert set(spectra.keys()) == {(1, 1)}


def test_extract_traces_nothing(image):
    table = new_trace_table(2)
    add_trace(table, 1, 1, [5.0], [5.0], [5.0])

    with pytest.raises(NotFound):
        extract_traces(image, table)
