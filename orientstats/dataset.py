from abc import ABC, abstractmethod
import numpy as np

from . utility import log_info, ValidationError
from . stereomath import line_to_cartesian, opposite_azimuth, \
    complement_angle, strike_from_dip_direction, symmetric_azimuth

# input format codes
DIPDIR_DIP = 1
DIP_DIPDIR = 2
TREND_PLUNGE = 3
PLUNGE_TREND = 4

INPUT_FORMATS = {
    DIPDIR_DIP: ("dip_direction", "dip"),
    DIP_DIPDIR: ("dip", "dip_direction"),
    TREND_PLUNGE: ("trend", "plunge"),
    PLUNGE_TREND: ("plunge", "trend"),
}

_field_ranges = {
    "dip": 90.0,
    "dip_direction": 360.0,
    "plunge": 90.0,
    "trend": 360.0,
}


def check_input_format(input_format):
    """
    Return the column names of a valid input format code
    """
    try:
        return INPUT_FORMATS[int(input_format)]
    except (KeyError, TypeError, ValueError):
        raise ValidationError(
            f"Unknown input format {input_format!r}, expected one of "
            f"{sorted(INPUT_FORMATS)}", field="input_format") from None


class DatasetBase(ABC):
    def __init__(self, **kwargs):
        self._data = None
        self._data_legend = kwargs.get("data_legend", "")
        self._color_data = None
        self._color_legend = ""
        self._n_entries = 0

    @property
    def n_entries(self):
        return self._n_entries

    @property
    def data(self):
        return self._data

    @property
    def data_legend(self):
        return self._data_legend

    @property
    def color_data(self):
        return self._color_data

    @property
    def color_legend(self):
        return self._color_legend

    @data.setter
    def data(self, value):
        self._set_data(value)

    @color_data.setter
    def color_data(self, value):
        if value is None:
            return
        if len(value) != self.n_entries:
            raise RuntimeError("The dataset has length {0} "
                               "but the color data has length {1}".
                               format(self.n_entries, len(value)))
        self._color_data = value

    @abstractmethod
    def _set_data(self, value):
        pass


class OrientationData(DatasetBase):
    '''
    Stores orientation measurements of planes (as poles) or lines,
    in the form of directional cosines.
    Every measurement is stored together with its reflection
    through the origin, so the first n_records rows are the
    original lower-hemisphere vectors and the last n_records rows
    are their upper-hemisphere antipodes.
    The record fields are duplicated alongside without reflection.
    '''

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._input_format = None
        self._n_records = 0
        self.dip_direction = None
        self.dip = None
        self.trend = None
        self.plunge = None
        self.strike = None

    @property
    def input_format(self):
        return self._input_format

    @property
    def n_records(self):
        '''
        Number of measurements before duplication
        '''
        return self._n_records

    @property
    def is_plane(self):
        return self._input_format in (DIPDIR_DIP, DIP_DIPDIR)

    def load_data(self, table, input_format=DIPDIR_DIP,
                  data_legend=None):
        '''
        Load a N x 2 table of orientation pairs, with the column
        order given by the input format code.
        '''
        columns = check_input_format(input_format)
        self._input_format = int(input_format)
        if data_legend is not None:
            self._data_legend = data_legend
        elif not self._data_legend:
            self._data_legend = "Poles" if self.is_plane else "Lineation"

        table = self._check_table(table)
        fields = dict(zip(columns, table.T))
        if self.is_plane:
            dip_direction, dip = fields["dip_direction"], fields["dip"]
            plunge = complement_angle(dip)
            trend = opposite_azimuth(dip_direction)
            strike = strike_from_dip_direction(dip_direction)
        else:
            trend, plunge = fields["trend"], fields["plunge"]
            dip = complement_angle(plunge)
            dip_direction = opposite_azimuth(trend)
            strike = None

        for name, value in (("dip", dip), ("dip_direction", dip_direction),
                            ("plunge", plunge), ("trend", trend)):
            upper = _field_ranges[name]
            if np.max(value) > upper or np.min(value) < 0.0:
                raise ValidationError(
                    f"{name} values must lie in [0, {upper:g}], "
                    f"found range [{np.min(value):g}, {np.max(value):g}]",
                    field=name)

        self._n_records = table.shape[0]
        self.dip_direction = np.concatenate((dip_direction, dip_direction))
        self.dip = np.concatenate((dip, dip))
        self.trend = np.concatenate((trend, trend))
        self.plunge = np.concatenate((plunge, plunge))
        self.strike = None if strike is None \
            else np.concatenate((strike, strike))
        self.data = np.column_stack((trend, plunge))
        log_info("OrientationData of {0} records ({1} vectors) loaded "
                 "with legend \"{2}\"".format(self.n_records, self.n_entries,
                                               self.data_legend))

    def _set_data(self, value):
        '''
        Build the dual-hemisphere vector set from trend/plunge pairs
        '''
        poles = line_to_cartesian(value)
        self._data = np.vstack((poles, -poles))
        self._n_entries = self._data.shape[0]

    @staticmethod
    def _check_table(table):
        try:
            table = np.asarray(table, dtype=np.double)
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Orientation table is not numeric: {e}", field="table") from e
        if table.ndim != 2 or table.shape[1] != 2:
            raise ValidationError(
                f"Orientation table must be N x 2, got shape {table.shape}",
                field="table")
        if table.shape[0] == 0:
            raise ValidationError("Orientation table is empty", field="table")
        if not np.all(np.isfinite(table)):
            raise ValidationError(
                "Orientation table contains non-finite values", field="table")
        return table

    def original_columns(self):
        '''
        The duplicated record table in the original input convention
        '''
        columns = INPUT_FORMATS[self._input_format]
        return np.column_stack([getattr(self, name) for name in columns])

    def rose_angles(self, symmetric=False):
        '''
        Strike for planes and trend for lines, of the original records only.
        With symmetric=True the opposite azimuths are appended.
        '''
        angles = self.strike if self.strike is not None else self.trend
        angles = angles[:self.n_records]
        return symmetric_azimuth(angles) if symmetric else angles

    def subset(self, mask, data_legend):
        '''
        Vectors selected by a boolean mask, as a new dataset
        sharing the record fields
        '''
        sub = OrientationData(data_legend=data_legend)
        sub._input_format = self._input_format
        sub._n_records = int(np.count_nonzero(mask))
        sub._data = self._data[mask]
        sub._n_entries = sub._data.shape[0]
        for name in ("dip_direction", "dip", "trend", "plunge", "strike"):
            value = getattr(self, name)
            setattr(sub, name, None if value is None else value[mask])
        return sub
