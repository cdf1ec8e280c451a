import math

import pytest

from mapmatch.core import local_consistency, z_score


@pytest.mark.parametrize("scores", [[], [5.0], [3.0, 3.0, 3.0], [2.0, 2.0005]])
def test_z_score_is_zero_without_spread(scores):
    assert z_score(scores[0] if scores else 0.0, scores) == 0.0


def test_z_score_uses_population_stddev():
    scores = [1.0, 3.0, 5.0]
    expected = (3.0 - 1.0) / math.sqrt(8.0 / 3.0)
    assert z_score(1.0, scores) == pytest.approx(expected)


def test_z_score_of_two_hypotheses_is_one():
    assert z_score(4.0, [4.0, 10.0]) == pytest.approx(1.0)


def test_local_consistency_is_zero_at_exact_alignment(noise_factory, probe_factory):
    image = noise_factory(30, 48, 40)
    probe = probe_factory(image, 10, 8, 24, 24)
    assert local_consistency(image, probe, 10, 8, step=1) == 0.0


def test_local_consistency_detects_one_bad_quadrant(noise_factory, probe_factory):
    image = noise_factory(31, 48, 40)
    probe = probe_factory(image, 10, 8, 24, 24)
    target = image.copy()
    target[8:20, 10:22, :3] = 255 - target[8:20, 10:22, :3]

    assert local_consistency(target, probe, 10, 8, step=1) > 20.0


def test_local_consistency_skips_out_of_bounds_points(noise_factory, probe_factory):
    image = noise_factory(32, 48, 40)
    probe = probe_factory(image, 10, 8, 24, 24)

    assert local_consistency(image, probe, 100, 100) == 0.0


def test_local_consistency_drops_quadrants_outside_the_target(noise_factory, probe_factory):
    image = noise_factory(33, 48, 40)
    probe = probe_factory(image, 10, 8, 24, 24)
    target = image.copy()
    target[8:20, 22:34, :3] = 255 - target[8:20, 22:34, :3]

    assert local_consistency(target, probe, 10, 8, step=1) > 20.0
    # the right quadrants start at column 22 and fall off the cropped map
    assert local_consistency(target[:, :22], probe, 10, 8, step=1) == 0.0


def test_local_consistency_scores_cleared_pixels_as_black(noise_factory, probe_factory):
    image = noise_factory(36, 48, 40)
    probe = probe_factory(image, 10, 8, 24, 24)
    target = image.copy()
    target[8:20, 10:22] = 0

    assert local_consistency(target, probe, 10, 8, step=1) > 20.0


def test_local_consistency_rejects_non_positive_step(noise_factory, probe_factory):
    image = noise_factory(34, 20, 20)
    probe = probe_factory(image, 0, 0, 8, 8)
    with pytest.raises(ValueError):
        local_consistency(image, probe, 0, 0, step=0)


def test_local_consistency_ignores_alpha_channel_values(noise_factory, probe_factory):
    image = noise_factory(35, 40, 40)
    probe = probe_factory(image, 4, 4, 20, 20)
    target = image.copy()
    target[..., 3] = 0
    assert local_consistency(target, probe, 4, 4, step=2) == 0.0
