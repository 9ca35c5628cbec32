import math
import numpy as np

from . stereomath import line_to_cartesian
from . projection import EqualArea
from . dataset import DatasetBase, OrientationData
from . utility import Timer, log_info

# half apical angle of the counting cone (degrees), i.e. a cone
# covering 1% of the hemisphere area
COUNTING_CONE = 8.1096144559941786958201832872484


class CountingGrid:
    """
    Generate a counting grid for density calculation.
    The "polar" grid has a node at the lower pole and n_rings
    concentric rings, equally spaced in the equal-area net, with
    nodes_per_ring * i nodes on ring i. The default grid has 331 nodes.
    """

    def __init__(self, grid_type="polar"):
        self._grid_type = grid_type

    def _polar_grid(self, n_rings, nodes_per_ring):
        """
        Construct the counting grid in the lineation coordinate
        Assuming lower hemispheric
        """
        nodes = [(0.0, 90.0)]  # lower pole
        for i in range(1, n_rings + 1):
            m = nodes_per_ring * i
            radius = i / n_rings
            plunge = 90.0 - 2.0 * math.degrees(math.asin(radius / math.sqrt(2.0)))
            for j in range(1, m + 1):
                nodes.append((j * 360.0 / m, plunge))
        return np.array(nodes)

    def generate(self, n_rings=10, nodes_per_ring=6):
        """
        Return the trend/plunge of the grid nodes (in degrees)
        """
        if self._grid_type == "polar":
            return self._polar_grid(n_rings, nodes_per_ring)
        raise RuntimeError(f"Unknown counting grid type {self._grid_type}")


def _frozen(array):
    array.setflags(write=False)
    return array


# the fixed grid shared by all density computations
GRID_TREND_PLUNGE = _frozen(CountingGrid("polar").generate())
GRID_NODES = _frozen(line_to_cartesian(GRID_TREND_PLUNGE))
GRID_XY = _frozen(EqualArea().project(GRID_NODES))


def count_in_cone(nodes, vectors, cone_angle=COUNTING_CONE, chunk_size=4096):
    """
    Number of vectors within cone_angle (degrees) of each node.
    The angle is measured without folding antipodes together,
    so only vectors on the same side as the node are counted.
    """
    count = np.zeros(nodes.shape[0], dtype=np.int64)
    for begin in range(0, vectors.shape[0], chunk_size):
        chunk = vectors[begin:begin + chunk_size]
        theta = np.degrees(np.arccos(np.clip(nodes.dot(chunk.T), -1.0, 1.0)))
        count += (theta <= cone_angle).sum(axis=1)
    return count


class DensityGrid(DatasetBase):
    """
    Object for computing the pole density over the fixed polar grid,
    as the percentage of data within the counting cone of each node.
    """

    def __init__(self, data_to_contour=None, **kwargs):
        super().__init__()
        self.parse_options(kwargs)
        self._count = None
        self._dataset_to_contour = None
        self._data = GRID_NODES
        self._n_entries = GRID_NODES.shape[0]
        if data_to_contour is not None:
            self.load_data(data_to_contour)

    def parse_options(self, opts):
        self._counting_angle = opts.get("counting_angle", COUNTING_CONE)
        self._chunk_size = opts.get("chunk_size", 4096)

    def load_data(self, data_to_contour):
        if isinstance(data_to_contour, OrientationData):
            vectors = data_to_contour.data
            legend = data_to_contour.data_legend
        elif isinstance(data_to_contour, np.ndarray):
            vectors = np.atleast_2d(data_to_contour)
            legend = "Vectors"
        else:
            raise RuntimeError(
                "Dataset type {0} cannot be contoured.".format(
                    type(data_to_contour)))
        if vectors.shape[0] == 0:
            raise RuntimeError(
                "The input dataset is empty and therefore "
                "cannot be contoured.")
        self._dataset_to_contour = vectors
        self._data_legend = legend + " counting grid"
        self._color_legend = legend + " density (%)"
        self.count()

    @property
    def dataset_to_contour(self):
        return self._dataset_to_contour

    @property
    def counting_method(self):
        return "counting cone {0:.4f} deg".format(self._counting_angle)

    @property
    def counting_angle(self):
        return self._counting_angle

    @property
    def nodes(self):
        return self._data

    @property
    def trend_plunge(self):
        return GRID_TREND_PLUNGE

    @property
    def xy(self):
        return GRID_XY

    @property
    def count_data(self):
        return self._count

    @property
    def max_density(self):
        '''
        Maximum concentration, in % of the data per 1% area
        '''
        return float(self.color_data.max())

    def count(self):
        if not np.all(np.isfinite(self.dataset_to_contour)):
            raise RuntimeError("Data to be contoured has infinite values.")

        with Timer() as _:
            self._count = count_in_cone(self.nodes, self.dataset_to_contour,
                                        self._counting_angle, self._chunk_size)
            self.color_data = self._count / self.dataset_to_contour.shape[0] * 100.0
        log_info("DensityGrid range [{0:.2f}, {1:.2f}] % for {2} vectors "
                 "using {3}.".format(self.color_data.min(),
                                     self.color_data.max(),
                                     self.dataset_to_contour.shape[0],
                                     self.counting_method))
        return self.color_data

    def _set_data(self, value):
        raise RuntimeError(
            "Data attributes in DensityGrid is set automatically. "
            "Do not use this setter.")
