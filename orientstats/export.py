import numpy as np

from . dataset import INPUT_FORMATS
from . utility import log_info


class ClassificationExporter:
    '''
    Map the class labels of the dual-hemisphere vectors back onto the
    measurements, in their original input convention.
    Only rows whose class survived the pruning are exported.
    '''

    def __init__(self, dataset, labels, retained_labels):
        if len(labels) != dataset.n_entries:
            raise RuntimeError(
                f"The dataset has {dataset.n_entries} vectors "
                f"but {len(labels)} labels are given")
        self._dataset = dataset
        self._labels = np.asarray(labels, dtype=int)
        self._retained_labels = sorted(int(label) for label in retained_labels)

    @property
    def column_names(self):
        return list(INPUT_FORMATS[self._dataset.input_format]) + ["class"]

    @property
    def retained_labels(self):
        return self._retained_labels

    def row_mask(self):
        return np.isin(self._labels, self._retained_labels)

    def to_table(self):
        '''
        N x 3 table: the two input columns and the class label
        '''
        table = np.column_stack((self._dataset.original_columns(),
                                 self._labels))
        return table[self.row_mask()]

    def write_to_file(self, **kwargs):
        '''
        Write the classified table as comma separated values
        '''
        file = kwargs.get("file",
                          self._dataset.data_legend + "_classified.csv")
        header = kwargs.get("header", True)
        table = self.to_table()
        np.savetxt(file, table, delimiter=",", fmt=["%.6f", "%.6f", "%d"],
                   header=",".join(self.column_names) if header else "",
                   comments="")
        log_info(f"{table.shape[0]} classified entries written "
                 f"to file [{file}]")
        return file
