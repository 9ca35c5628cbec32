from abc import ABC, abstractmethod
import math
import numpy as np

from . dataset import DatasetBase
from . utility import ValidationError


class ProjectionBase(ABC):
    """
    Abstract for all projections.
    Directional cosines (L, M, N) are mapped to map coordinates
    with x pointing east (M) and y pointing north (L).
    """

    def project(self, data):
        if isinstance(data, DatasetBase):
            l_cos, m_cos, n_cos = data.data.T
        elif isinstance(data, np.ndarray):
            l_cos, m_cos, n_cos = np.atleast_2d(data).T
        else:
            raise RuntimeError(f"Unexpected data type {type(data)}")
        return np.array(self._do_project(l_cos, m_cos, n_cos)).T

    def inverse(self, xy):
        """
        Convert map coordinates back to trend/plunge (in degrees)
        """
        xy = np.atleast_2d(np.asarray(xy, dtype=np.double))
        if xy.shape[1] != 2:
            raise ValidationError(
                f"Projected points must be N x 2, got shape {xy.shape}")
        x, y = xy.T
        radius = np.sqrt(x*x + y*y)
        if np.any(radius > 1.0 + 1.0e-12):
            raise ValidationError(
                "Projected points must lie inside the primitive circle",
                field="radius")
        trend = np.degrees(np.arctan2(x, y))
        trend = trend + 360.0 * (trend < 0.0)
        plunge = self._do_inverse_plunge(np.minimum(radius, 1.0))
        return np.array([trend, plunge]).T

    @abstractmethod
    def _do_project(self, l_cos, m_cos, n_cos):
        return

    @abstractmethod
    def _do_inverse_plunge(self, radius):
        return


class EqualArea(ProjectionBase):
    """
    Lambert equal area projection.
    The lower-hemisphere is normalized to unit radius
    """

    def _do_project(self, l_cos, m_cos, n_cos):
        # normalized so that the lower hemisphere
        # projects to unit circle
        alpha = np.sqrt(1.0 / (1.0 - n_cos))
        return m_cos * alpha, l_cos * alpha

    def _do_inverse_plunge(self, radius):
        return 90.0 - 2.0 * np.degrees(np.arcsin(radius / math.sqrt(2.0)))


class EqualAngle(ProjectionBase):
    """
    Schmidt equal angle projection.
    """

    def _do_project(self, l_cos, m_cos, n_cos):
        alpha = 1.0 / (1.0 - n_cos)
        return m_cos * alpha, l_cos * alpha

    def _do_inverse_plunge(self, radius):
        return 90.0 - 2.0 * np.degrees(np.arctan(radius))
