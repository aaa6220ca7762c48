import itertools

import numpy as np
import pytest

from fractal_sampler.core.filters import BoxFilter, MitchellFilter
from fractal_sampler.core.reconstruction import Reconstructor
from fractal_sampler.core.sampling import Sample, StratifiedSampler


def test_empty_reconstructor_returns_zero():
    reconstructor = Reconstructor(BoxFilter())
    assert reconstructor.value() == 0.0
    assert reconstructor.count == 0


def test_all_zero_weights_return_default():
    # Every sample lies outside the narrow support
    reconstructor = Reconstructor(BoxFilter(0.1, 0.1))
    for offset in (0.0, 0.9, 0.95):
        reconstructor.accumulate(Sample(0, 0, offset, offset), 0.7)
    assert reconstructor.total_weight == 0.0
    assert reconstructor.count == 3
    assert reconstructor.value() == 0.0


def test_box_filter_gives_plain_mean():
    reconstructor = Reconstructor(BoxFilter())
    results = [0.1, 0.2, 0.3, 0.6]
    for sample, result in zip(StratifiedSampler(0, 0, 4, jitter=False), results):
        reconstructor.accumulate(sample, result)
    assert reconstructor.total_weight == 4.0
    assert reconstructor.value() == pytest.approx(0.3)


def test_weights_follow_filter():
    mitchell = MitchellFilter()
    reconstructor = Reconstructor(mitchell)
    near = Sample(0, 0, 0.5, 0.5)
    far = Sample(0, 0, 0.9, 0.9)
    reconstructor.accumulate(near, 1.0)
    reconstructor.accumulate(far, 0.0)

    w_near = mitchell.evaluate(0.0, 0.0)
    w_far = mitchell.evaluate(0.4, 0.4)
    assert reconstructor.total_weight == pytest.approx(w_near + w_far)
    assert reconstructor.value() == pytest.approx(w_near / (w_near + w_far))


def test_accumulation_order_does_not_matter():
    samples = list(StratifiedSampler(0, 0, 9, jitter=False))
    results = [0.05 * i for i in range(9)]
    expected = None
    for order in itertools.islice(itertools.permutations(range(9)), 0, 2000, 97):
        reconstructor = Reconstructor(MitchellFilter())
        for i in order:
            reconstructor.accumulate(samples[i], results[i])
        if expected is None:
            expected = reconstructor.value()
        assert reconstructor.value() == pytest.approx(expected)


def test_vector_valued_results():
    reconstructor = Reconstructor(BoxFilter(), zero=np.zeros(3))
    reconstructor.accumulate(Sample(0, 0, 0.25, 0.25), np.array([1.0, 0.0, 0.0]))
    reconstructor.accumulate(Sample(0, 0, 0.75, 0.75), np.array([0.0, 1.0, 0.5]))
    np.testing.assert_allclose(reconstructor.value(), [0.5, 0.5, 0.25])


def test_vector_zero_weight_returns_zero_vector():
    reconstructor = Reconstructor(BoxFilter(0.1, 0.1), zero=np.zeros(2))
    reconstructor.accumulate(Sample(0, 0, 0.9, 0.9), np.array([1.0, 1.0]))
    np.testing.assert_array_equal(reconstructor.value(), [0.0, 0.0])


def test_filter_is_shared_not_copied():
    shared = MitchellFilter()
    first = Reconstructor(shared)
    second = Reconstructor(shared)
    assert first.filter is second.filter
