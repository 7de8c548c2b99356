import numpy as np

from biquadtools import PRBS


def test_values_are_plus_minus_one():
    src = PRBS(seed=1)
    values = [src.get() for _ in range(1000)]
    assert set(values) == {-1, 1}
    assert all(isinstance(v, int) for v in values)


def test_float_values():
    src = PRBS(seed=1, dtype=float)
    values = src.sample(1000)
    assert values.dtype == np.float64
    assert set(np.unique(values)) == {-1.0, 1.0}


def test_seed_reproducible():
    a = PRBS(seed=42).sample(256)
    b = PRBS(seed=42).sample(256)
    np.testing.assert_array_equal(a, b)
    assert not np.array_equal(a, PRBS(seed=43).sample(256))


def test_reset_restarts_sequence():
    src = PRBS(seed=3)
    first = [src.get() for _ in range(20)]
    src.reset()
    assert [src.get() for _ in range(20)] == first


def test_roughly_balanced():
    values = PRBS(seed=0).sample(10000)
    assert abs(values.mean()) < 0.05
