import numpy as np
import pytest

from tetherlab.dynamics.chain import ParticleChain, segment_count


def test_segment_count_rules():
    assert segment_count(100.0, 20.0) == 5
    assert segment_count(101.0, 20.0) == 6  # ceil
    assert segment_count(10.0, 20.0) == 3   # minimum of 3 segments
    assert segment_count(0.0, 20.0) == 3


def test_from_endpoints_colinear_layout():
    chain = ParticleChain.from_endpoints((0.0, 0.0), (100.0, 0.0), 20.0)

    assert chain.n_particles == 6
    assert np.allclose(chain.pos[:, 0], [0.0, 20.0, 40.0, 60.0, 80.0, 100.0])
    assert np.allclose(chain.pos[:, 1], 0.0)
    # Ends land exactly on the inputs
    assert np.array_equal(chain.pos[0], [0.0, 0.0])
    assert np.array_equal(chain.pos[-1], [100.0, 0.0])
    # At rest
    assert np.allclose(chain.velocities, 0.0)
    assert chain.nominal_length == pytest.approx(100.0)


def test_short_separation_gets_minimum_segments():
    chain = ParticleChain.from_endpoints((400.0, 300.0), (420.0, 300.0), 20.0)
    assert chain.n_particles == 4
    assert np.allclose(chain.segment_lengths(), 20.0 / 3.0)


def test_coincident_endpoints_seed_three_segments():
    chain = ParticleChain.from_endpoints((50.0, 50.0), (50.0, 50.0), 20.0)

    assert chain.n_particles == 4
    assert np.array_equal(chain.pos[0], [50.0, 50.0])
    assert np.allclose(chain.segment_lengths(), 20.0)
    assert chain.nominal_length == pytest.approx(60.0)
    assert np.all(np.isfinite(chain.pos))


def test_layout_is_deterministic():
    a = ParticleChain.from_endpoints((3.0, -7.0), (151.5, 42.25), 20.0)
    b = ParticleChain.from_endpoints((3.0, -7.0), (151.5, 42.25), 20.0)
    assert np.array_equal(a.pos, b.pos)
    assert np.array_equal(a.prev, b.prev)


def test_integrate_at_rest_is_noop():
    chain = ParticleChain.from_endpoints((0.0, 0.0), (60.0, 0.0), 20.0)
    before = chain.snapshot()
    chain.integrate()
    assert np.array_equal(chain.pos, before)


def test_integrate_carries_implicit_velocity():
    pos = np.array([[0.0, 0.0], [20.0, 0.0], [40.0, 0.0]])
    prev = pos - np.array([1.0, 0.5])
    chain = ParticleChain(pos, 20.0, previous=prev)

    chain.integrate()

    assert np.allclose(chain.pos, pos + np.array([1.0, 0.5]))
    assert np.allclose(chain.prev, pos)
    assert np.allclose(chain.velocities, [[1.0, 0.5]] * 3)


def test_integrate_moves_end_slots_too():
    pos = np.array([[0.0, 0.0], [20.0, 0.0], [40.0, 0.0]])
    prev = np.array([[-2.0, 0.0], [20.0, 0.0], [40.0, 3.0]])
    chain = ParticleChain(pos, 20.0, previous=prev)

    chain.integrate()

    assert np.allclose(chain.pos[0], [2.0, 0.0])
    assert np.allclose(chain.pos[-1], [40.0, -3.0])


def test_snapshot_is_a_copy():
    chain = ParticleChain.from_endpoints((0.0, 0.0), (60.0, 0.0), 20.0)
    snap = chain.snapshot()
    snap[1] = [999.0, 999.0]
    assert not np.allclose(chain.pos[1], [999.0, 999.0])


def test_span_and_deviation():
    pos = np.array([[0.0, 0.0], [30.0, 0.0], [30.0, 20.0]])
    chain = ParticleChain(pos, 20.0)
    assert chain.span() == pytest.approx(np.hypot(30.0, 20.0))
    assert np.allclose(chain.segment_lengths(), [30.0, 20.0])
    assert chain.max_segment_deviation() == pytest.approx(10.0)


@pytest.mark.parametrize("seg", [0.0, -5.0])
def test_invalid_segment_length(seg):
    with pytest.raises(ValueError, match="segment_length must be positive"):
        ParticleChain.from_endpoints((0.0, 0.0), (10.0, 0.0), seg)


def test_invalid_endpoint_shape():
    with pytest.raises(ValueError, match="shape"):
        ParticleChain.from_endpoints((0.0, 0.0, 0.0), (10.0, 0.0), 20.0)


def test_invalid_positions_array():
    with pytest.raises(ValueError):
        ParticleChain(np.zeros((1, 2)), 20.0)
    with pytest.raises(ValueError):
        ParticleChain(np.zeros((3, 2)), 20.0, previous=np.zeros((4, 2)))
