import os
import numpy as np

from . utility import log_info, ValidationError


def read_orientation_table(fname, skip_header=1, delimiter=",",
                           columns=(0, 1)):
    '''
    Read the two orientation columns of a delimited text file.
    The header line(s) are skipped.
    '''
    if not os.path.isfile(fname):
        raise ValidationError(f"File {fname} does not exist", field="file")
    try:
        table = np.loadtxt(fname, delimiter=delimiter, skiprows=skip_header,
                           usecols=columns, ndmin=2, dtype=np.double)
    except ValueError as e:
        raise ValidationError(
            f"File {fname} is not a numeric table: {e}", field="file") from e
    log_info(f"{table.shape[0]} orientation records read from file [{fname}]")
    return table
