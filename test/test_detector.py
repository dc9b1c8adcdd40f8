import numpy as np
import pytest

from pycr2res.detector import detector_shotnoise_model
from pycr2res.errors import InvalidInput

pytestmark = pytest.mark.unit


def test_zero_image():
    ima_data = np.zeros((12, 5), dtype=int)
    ima_errs = detector_shotnoise_model(ima_data, 7, 3)

    assert ima_errs.shape == (12, 5)
    assert np.array_equal(ima_errs, np.full((12, 5), 3.0))


def test_formula():
    ima_data = np.array([[0.0, 7.0, 70.0], [700.0, 1.0, 14.0]])
    gain, ron = 7.0, 2.0

    ima_errs = detector_shotnoise_model(ima_data, gain, ron)

    expected = np.sqrt(ima_data / gain + ron**2)
    np.testing.assert_allclose(ima_errs, expected)


def test_negative_values_are_read_noise():
    ima_data = np.array([[-5.0, -0.1, 0.0, 63.0]])
    ima_errs = detector_shotnoise_model(ima_data, 7, 3)

    assert ima_errs[0, 0] == 3
    assert ima_errs[0, 1] == 3
    assert ima_errs[0, 2] == 3
    assert ima_errs[0, 3] == pytest.approx(np.sqrt(18))


def test_input_not_modified():
    ima_data = np.array([[-5.0, 10.0]])
    detector_shotnoise_model(ima_data, 2, 1)
    assert np.array_equal(ima_data, [[-5.0, 10.0]])


@pytest.mark.parametrize("gain, ron", [(0, 3), (-1, 3), (7, -1)])
def test_invalid(gain, ron):
    with pytest.raises(InvalidInput):
        detector_shotnoise_model(np.zeros((2, 2)), gain, ron)
