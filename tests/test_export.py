"""Unit tests for exporting the classified measurements."""

import numpy as np
import pytest

from orientstats.dataset import OrientationData, DIP_DIPDIR
from orientstats.export import ClassificationExporter


@pytest.fixture
def dataset():
    dataset = OrientationData()
    dataset.load_data(np.array([[30.0, 100.0], [40.0, 110.0], [5.0, 280.0]]),
                      DIP_DIPDIR, data_legend="faults")
    return dataset


def test_only_retained_classes_are_exported(dataset):
    labels = np.array([1, 1, 2, 3, 3, 4])
    exporter = ClassificationExporter(dataset, labels, [2, 1])
    assert exporter.retained_labels == [1, 2]
    assert exporter.column_names == ["dip", "dip_direction", "class"]
    table = exporter.to_table()
    assert table.shape == (3, 3)
    assert np.allclose(table[:, :2], [[30.0, 100.0], [40.0, 110.0],
                                      [5.0, 280.0]])
    assert np.array_equal(table[:, 2], [1, 1, 2])


def test_reflected_rows_carry_the_record_values(dataset):
    labels = np.array([2, 2, 2, 1, 1, 1])
    table = ClassificationExporter(dataset, labels, [1]).to_table()
    assert np.allclose(table[:, :2], dataset.original_columns()[:3])
    assert np.all(table[:, 2] == 1)


def test_write_to_file(dataset, tmp_path):
    labels = np.array([1, 1, 2, 3, 3, 4])
    fname = tmp_path / "classified.csv"
    written = ClassificationExporter(dataset, labels, [1, 2]).write_to_file(
        file=str(fname))
    assert written == str(fname)
    with open(fname) as f:
        assert f.readline().strip() == "dip,dip_direction,class"
    table = np.loadtxt(fname, delimiter=",", skiprows=1)
    assert table.shape == (3, 3)
    assert np.array_equal(table[:, 2], [1, 1, 2])


def test_default_file_name_uses_the_legend(dataset, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    labels = np.array([1, 1, 1, 2, 2, 2])
    written = ClassificationExporter(dataset, labels, [1]).write_to_file(
        header=False)
    assert written == "faults_classified.csv"
    table = np.loadtxt(tmp_path / written, delimiter=",", ndmin=2)
    assert table.shape == (3, 3)


def test_label_count_must_match(dataset):
    with pytest.raises(RuntimeError):
        ClassificationExporter(dataset, np.array([1, 2, 3]), [1])


def test_written_values_keep_six_decimals(tmp_path):
    table = np.array([[123.4567, 45.1234567], [359.999999, 0.000001]])
    dataset = OrientationData()
    dataset.load_data(table)
    fname = tmp_path / "precise.csv"
    ClassificationExporter(dataset, np.array([1, 1, 2, 2]), [1]) \
        .write_to_file(file=str(fname))
    written = np.loadtxt(fname, delimiter=",", skiprows=1)
    assert np.allclose(written[:, :2], table, rtol=0.0, atol=5e-7)
    with open(fname) as f:
        assert f.readlines()[1].startswith("123.456700,45.123457,1")
