"""Unit tests for the Fisher statistics of a class."""

import math

import numpy as np
import pytest
from scipy.stats import vonmises_fisher

from orientstats.statistics import fisher_statistics, fisher_k, \
    confidence_cone, spherical_aperture, class_statistics, \
    prune_upward_classes, mean_vector
from orientstats.stereomath import line_to_cartesian


def test_fisher_k_estimators():
    assert fisher_k(20, 19.0) == pytest.approx(19.0)
    assert fisher_k(16, 15.5) == pytest.approx(30.0)
    # small-sample correction below 16
    assert fisher_k(10, 9.0) == pytest.approx(10.0 * 0.81)


def test_confidence_cone_and_aperture_formulas():
    n, R = 20, 19.5
    expected = math.degrees(math.asin(
        1.0 - (n - R) / R * (100.0 ** (1.0 / (n - 1)) - 1.0)))
    assert confidence_cone(n, R) == pytest.approx(expected)
    K = fisher_k(n, R)
    assert spherical_aperture(n, K) == pytest.approx(
        math.degrees(math.asin(math.sqrt(2.0 * (1.0 - 1.0 / n) / K))))


def test_mean_of_known_cluster():
    mean = line_to_cartesian([[120.0, 30.0]])[0]
    sample = vonmises_fisher(mean, 100.0).rvs(200, random_state=1)
    summary = fisher_statistics(sample, label=1, n_records=400)
    assert summary.n == 200
    assert summary.n_percent == pytest.approx(50.0)
    assert summary.mean_trend == pytest.approx(120.0, abs=2.0)
    assert summary.mean_plunge == pytest.approx(30.0, abs=2.0)
    assert summary.mean_dip == pytest.approx(60.0, abs=2.0)
    assert summary.mean_dip_direction == pytest.approx(300.0, abs=2.0)
    assert summary.fisher_k == pytest.approx(100.0, rel=0.25)
    assert 0.0 < summary.confidence_cone < 90.0
    assert 0.0 < summary.spherical_aperture < 90.0
    assert not summary.is_upward
    assert summary.issues == []
    assert np.linalg.norm(summary.mean_vector) == pytest.approx(1.0)


def test_repeated_direction_is_flagged_not_nan():
    xyz = np.tile(line_to_cartesian([[40.0, 20.0]]), (10, 1))
    summary = fisher_statistics(xyz, label=3)
    assert summary.resultant_length == pytest.approx(10.0, abs=1e-12)
    assert math.isinf(summary.fisher_k) and summary.fisher_k > 0
    assert summary.confidence_cone == 0.0
    assert summary.spherical_aperture == 0.0
    assert summary.is_degenerate
    assert summary.issues[0].severity == "warning"
    assert summary.issues[0].kind == "DegenerateClassWarning"
    assert summary.mean_trend == pytest.approx(40.0)


def test_vector_and_reflection_have_no_mean():
    v = np.array([0.0, 0.0, -1.0])
    summary = fisher_statistics(np.vstack((v, -v)), label=1)
    assert not summary.has_mean
    assert not summary.is_upward
    assert summary.issues[0].severity == "error"
    assert math.isnan(summary.mean_dip)


def test_single_vector_class():
    summary = fisher_statistics(np.array([[0.0, 0.6, -0.8]]), label=1)
    assert math.isinf(summary.fisher_k)
    assert math.isnan(summary.confidence_cone)
    assert summary.spherical_aperture == 0.0
    assert len(summary.issues) == 2


def test_very_dispersed_class_is_flagged():
    xyz = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, -1.0],
                    [-0.6, 0.0, -0.8]])
    summary = fisher_statistics(xyz, label=1)
    assert math.isnan(summary.confidence_cone)
    assert any("confidence cone" in issue.detail for issue in summary.issues)


def test_upward_classes_are_pruned():
    down = line_to_cartesian([[200.0, 50.0]])
    xyz = np.vstack((down, down * 0.999 + [0.0, 0.03, 0.0], -down))
    xyz /= np.linalg.norm(xyz, axis=1)[:, None]
    labels = np.array([1, 1, 2])
    summaries = class_statistics(xyz, labels, n_records=2)
    assert [s.label for s in summaries] == [1, 2]
    assert summaries[1].is_upward
    assert summaries[1].mean_dip > 90.0
    retained = prune_upward_classes(summaries)
    assert [s.label for s in retained] == [1]
    assert np.dot(summaries[0].mean_vector, summaries[1].mean_vector) < 0.0


def test_empty_labels_are_skipped():
    xyz = line_to_cartesian([[10.0, 10.0], [12.0, 11.0]])
    summaries = class_statistics(xyz, np.array([1, 3]), n_records=2)
    assert [s.label for s in summaries] == [1, 3]


def test_mean_vector_of_balanced_set():
    mean, R = mean_vector(np.array([[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]]))
    assert mean is None
    assert R == 0.0
