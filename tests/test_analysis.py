"""End-to-end tests of a clustering run."""

import os

import numpy as np
import pytest

from orientstats.analysis import OrientationAnalysis, AnalysisOptions
from orientstats.dataset import TREND_PLUNGE
from orientstats.projection import EqualArea
from orientstats.stereomath import line_to_cartesian
from orientstats.utility import ValidationError


def by_dip(result):
    return sorted((report.summary for report in result.reports),
                  key=lambda s: s.mean_dip)


def test_automatic_run_recovers_two_sets(two_sets):
    analysis = OrientationAnalysis(two_sets)
    result = analysis.run(clustering_mode="automatic", class_count=2,
                          random_state=0, n_init=5)
    assert result.model.n_clusters == 4
    assert result.n_classes == 2
    shallow, steep = by_dip(result)
    assert shallow.n == 20 and steep.n == 20
    assert shallow.n_percent == pytest.approx(50.0)
    assert shallow.mean_dip == pytest.approx(10.0, abs=3.0)
    assert steep.mean_dip == pytest.approx(45.0, abs=3.0)
    assert shallow.mean_dip_direction == pytest.approx(270.0, abs=5.0)
    assert steep.mean_dip_direction == pytest.approx(90.0, abs=5.0)
    assert shallow.fisher_k > 20.0 and steep.fisher_k > 20.0
    for report in result.reports:
        assert report.goodness_of_fit is not None
        assert report.density.color_data.shape == (331,)

    table = result.export().to_table()
    assert table.shape == (40, 3)
    assert set(table[:, 2]) == set(result.retained_labels)


def test_every_class_has_its_reflection_pruned(two_sets):
    result = OrientationAnalysis(two_sets).run(
        clustering_mode="automatic", class_count=2, random_state=1)
    assert len(result.summaries) == 4
    upward = [s for s in result.summaries if s.is_upward]
    assert len(upward) == 2
    for summary in upward:
        assert summary.label not in result.retained_labels
    # each record is exported exactly once
    assert result.export().row_mask().sum() == 40


def test_manual_seeds_fix_the_label_order(two_sets):
    analysis = OrientationAnalysis(two_sets)
    result = analysis.run(seeds=[(45.0, 270.0), (80.0, 90.0)])
    assert result.retained_labels == [1, 2]
    first, second = result.report(1).summary, result.report(2).summary
    assert first.mean_dip == pytest.approx(45.0, abs=3.0)
    assert first.mean_dip_direction == pytest.approx(90.0, abs=5.0)
    assert second.mean_dip == pytest.approx(10.0, abs=3.0)
    assert np.all(result.labels[:20] == 1)
    assert np.all(result.labels[20:40] == 2)
    with pytest.raises(KeyError):
        result.report(3)


def test_picked_seed_on_the_net(two_sets):
    pole = line_to_cartesian([[270.0, 45.0]])
    picks = EqualArea().project(pole)
    options = AnalysisOptions(picks=picks)
    (plunge, trend), = options.seeds
    assert plunge == pytest.approx(45.0)
    assert trend == pytest.approx(270.0)

    result = OrientationAnalysis(two_sets).run(options)
    # a single seed splits the net into two hemispheres
    assert result.retained_labels == [1]
    assert result.report(1).summary.n == 40


def test_identical_records_are_flagged():
    table = np.zeros((4, 2))
    result = OrientationAnalysis(table).run(
        clustering_mode="automatic", class_count=1, random_state=0)
    assert result.n_classes == 1
    report = result.reports[0]
    assert report.summary.n == 4
    assert report.summary.mean_dip == pytest.approx(0.0, abs=1e-6)
    assert report.summary.is_degenerate
    assert report.goodness_of_fit is None
    assert report.status == "error"
    kinds = [issue.kind for _, issue in result.warnings]
    assert "DegenerateClassWarning" in kinds
    assert "GoodnessOfFitError" in kinds
    assert "GOF test failed" in result.summary_text()


def test_summary_text_layout(two_sets):
    result = OrientationAnalysis(two_sets).run(
        seeds=[(45.0, 270.0), (80.0, 90.0)])
    text = result.summary_text()
    lines = text.splitlines()
    assert lines[0].strip().startswith("Class ID")
    assert any(line.strip().startswith("Mean Dip") for line in lines)
    assert "Max conc. % of total per 1% area" in text
    assert text.count("Class 1: ") == 3


def test_summary_reports_class_and_global_concentration(two_sets):
    result = OrientationAnalysis(two_sets).run(
        seeds=[(45.0, 270.0), (80.0, 90.0)])
    lines = result.summary_text().splitlines()
    class_row, = [line for line in lines
                  if line.strip().startswith("Max conc. % of class")]
    values = [float(v) for v in class_row.split("=")[1].split()]
    expected = [r.density.max_density for r in result.reports]
    assert len(values) == result.n_classes == 2
    assert values == pytest.approx(expected, abs=0.005)
    global_row, = [line for line in lines
                   if line.strip().startswith("Max conc. % of total")]
    assert float(global_row.split("=")[1]) == \
        pytest.approx(result.global_density.max_density, abs=0.005)


def test_lineations_use_their_own_columns(rng):
    table = np.column_stack((rng.uniform(100.0, 104.0, 15),
                             rng.uniform(30.0, 34.0, 15)))
    analysis = OrientationAnalysis(table)
    assert analysis.dataset.is_plane
    # the format of a run replaces the one the table was loaded with
    result = analysis.run(input_format=TREND_PLUNGE, seeds=[(32.0, 102.0)])
    assert analysis.dataset.input_format == TREND_PLUNGE
    assert result.dataset is analysis.dataset
    assert result.report(1).summary.n == 15
    exporter = result.export()
    assert exporter.column_names == ["trend", "plunge", "class"]
    assert np.allclose(exporter.to_table()[:, :2], table)


@pytest.mark.parametrize("options", [
    {"clustering_mode": "hierarchical"},
    {"input_format": 7},
    {"clustering_mode": "manual", "picks": [(2.0, 0.0)]},
])
def test_invalid_options(options):
    with pytest.raises(ValidationError):
        AnalysisOptions(**options)


def test_iterate_until_accepted(two_sets):
    analysis = OrientationAnalysis(two_sets)

    def concentrated(result):
        return result.n_classes == 2 and \
            all(r.summary.fisher_k > 20.0 for r in result.reports)

    result = analysis.iterate(
        [dict(clustering_mode="automatic", class_count=n,
              random_state=0, n_init=5) for n in (1, 2, 3)],
        concentrated)
    assert result.options.class_count == 2
    assert concentrated(result)

    with pytest.raises(ValidationError):
        analysis.iterate([], concentrated)


def test_from_file(two_sets, tmp_path):
    fname = tmp_path / "joints.csv"
    np.savetxt(fname, two_sets, delimiter=",", header="dipdir,dip",
               comments="")
    analysis = OrientationAnalysis.from_file(str(fname))
    assert analysis.dataset.n_records == 40
    assert analysis.dataset.data_legend == os.path.join(str(tmp_path),
                                                        "joints")

    result = analysis.run(seeds=[(45.0, 270.0), (80.0, 90.0)])
    written = result.export().write_to_file()
    assert written == os.path.join(str(tmp_path), "joints_classified.csv")
    assert np.loadtxt(written, delimiter=",", skiprows=1).shape == (40, 3)


def test_missing_file():
    with pytest.raises(ValidationError) as excinfo:
        OrientationAnalysis.from_file("no_such_file.csv")
    assert excinfo.value.field == "file"
