import numpy as np


def line_to_cartesian(tpdata, lower_hemisphere=True):
    """
    Convert lineation trend/plunge data (in degrees)
    to directional cosines (L, M, N) in Cartesian coordinates.
    L points north, M points east and N points up,
    so that a lower-hemisphere line has N = -sin(plunge).
    """
    tpdata = np.atleast_2d(np.asarray(tpdata, dtype=np.double))
    trend, plunge = np.radians(tpdata).T
    l_cos = np.cos(plunge) * np.cos(trend)
    m_cos = np.cos(plunge) * np.sin(trend)
    n_cos = -np.sin(plunge) if lower_hemisphere else np.sin(plunge)
    return np.array([l_cos, m_cos, n_cos]).T


def cartesian_to_line(lmn):
    """
    Convert directional cosines to trend and plunge (in degrees).
    The plunge is signed: vectors pointing into the upper hemisphere
    get a negative plunge, they are not flipped.
    """
    lmn = np.atleast_2d(lmn)
    l_cos, m_cos, n_cos = lmn.T
    trend = np.degrees(np.arctan2(m_cos, l_cos)) % 360.0
    plunge = np.degrees(np.arcsin(np.clip(-n_cos, -1.0, 1.0)))
    return np.array([trend, plunge]).T


def opposite_azimuth(azimuth):
    """
    Azimuth of the opposite direction, i.e. trend of the pole
    from the dip direction of a plane and vice versa.
    Values up to 180 are increased and larger ones decreased,
    so that the result stays within [0, 360].
    """
    azimuth = np.asarray(azimuth, dtype=np.double)
    return np.where(azimuth <= 180.0, azimuth + 180.0, azimuth - 180.0)


def complement_angle(angle):
    """
    Plunge of the pole from the dip of a plane and vice versa.
    """
    return 90.0 - np.asarray(angle, dtype=np.double)


def strike_from_dip_direction(dip_direction):
    """
    Right-hand-rule strike from the dip direction of a plane
    """
    dip_direction = np.asarray(dip_direction, dtype=np.double)
    return np.where(dip_direction < 90.0,
                    dip_direction + 270.0, dip_direction - 90.0)


def symmetric_azimuth(azimuth):
    """
    Double an azimuth series with the opposite directions,
    as used by bidirectional rose diagrams.
    """
    azimuth = np.asarray(azimuth, dtype=np.double)
    return np.concatenate((azimuth, opposite_azimuth(azimuth)))


def angular_distance(u, v):
    """
    Angle (in degrees) between the unit vectors u and v,
    which may be single vectors or N x 3 arrays.
    """
    dot = np.clip(np.sum(np.asarray(u) * np.asarray(v), axis=-1), -1.0, 1.0)
    return np.degrees(np.arccos(dot))


def lower_hemisphere(lmn):
    """
    Flip the vectors pointing upwards (N > 0) onto their antipodes,
    so that every vector projects inside the primitive circle.
    """
    lmn = np.atleast_2d(np.asarray(lmn, dtype=np.double))
    return np.where(lmn[:, 2:3] > 0.0, -lmn, lmn)
