from collections import namedtuple
import math
import numpy as np

from . stereomath import cartesian_to_line, opposite_azimuth
from . utility import log_info, log_warning, DegenerateClassWarning

# below this sample size Fisher K gets the small-sample correction
SMALL_SAMPLE_SIZE = 16
# probability complement of the confidence cone (99%)
CONE_PROBABILITY = 0.01
# relative tolerance of n - R and R against n
DEGENERACY_TOLERANCE = 1.0e-10

Issue = namedtuple("Issue", ["severity", "kind", "detail"])


def mean_vector(xyz):
    """
    Compute the mean vector of a vector dataset
    return the normalized mean vector and the resultant length R.
    The mean vector is None when R vanishes.
    """
    assert xyz.shape[1] == 3, "The input data must be an N x 3 array"
    n = xyz.shape[0]
    resultant = xyz.sum(axis=0)
    R = float(np.linalg.norm(resultant))
    if R <= DEGENERACY_TOLERANCE * n:
        return None, R
    return resultant / R, R


def fisher_k(n, R):
    """
    Fisher concentration with the usual textbook estimators,
    different for n >= 16 and n < 16.
    """
    if n >= SMALL_SAMPLE_SIZE:
        return (n - 1) / (n - R)
    return n / (n - R) * (1.0 - 1.0 / n) ** 2


def confidence_cone(n, R, probability=CONE_PROBABILITY):
    """
    Apical half angle (degrees) of the confidence cone
    around the mean direction. Requires n >= 2.
    """
    arg = 1.0 - (n - R) / R * ((1.0 / probability) ** (1.0 / (n - 1)) - 1.0)
    if abs(arg) > 1.0:
        return math.nan
    return math.degrees(math.asin(arg))


def spherical_aperture(n, K):
    """
    Spherical aperture (degrees) containing 68.26% of the data
    """
    arg = math.sqrt(2.0 * (1.0 - 1.0 / n) / K)
    if arg > 1.0:
        return math.nan
    return math.degrees(math.asin(arg))


class FisherSummary:
    '''
    Fisher statistics of one class of vectors
    '''

    def __init__(self, label, n, n_records):
        self.label = label
        self.n = n
        self.n_percent = n / n_records * 100.0 if n_records else math.nan
        self.resultant_length = math.nan
        self.mean_vector = None
        self.mean_plunge = math.nan
        self.mean_trend = math.nan
        self.mean_dip = math.nan
        self.mean_dip_direction = math.nan
        self.fisher_k = math.nan
        self.confidence_cone = math.nan
        self.spherical_aperture = math.nan
        self.issues = []

    @property
    def has_mean(self):
        return self.mean_vector is not None

    @property
    def is_upward(self):
        '''
        The mean vector points into the upper hemisphere
        '''
        return self.has_mean and self.mean_dip > 90.0

    @property
    def is_degenerate(self):
        return any(issue.kind == DegenerateClassWarning.__name__
                   for issue in self.issues)

    def flag(self, severity, detail, kind=DegenerateClassWarning.__name__):
        self.issues.append(Issue(severity, kind, detail))
        log_warning(f"Class {self.label}: {detail}")

    def __repr__(self):
        return (f"FisherSummary(label={self.label}, n={self.n}, "
                f"dip={self.mean_dip:.2f}, dir={self.mean_dip_direction:.2f}, "
                f"K={self.fisher_k:.2f})")


def fisher_statistics(xyz, label=None, n_records=None):
    """
    Fisher mean direction, concentration, confidence cone and
    spherical aperture of a class of unit vectors.
    Degenerate classes are flagged in the issues of the summary
    and get sentinel values instead of raising.
    """
    n = xyz.shape[0]
    summary = FisherSummary(label, n, n if n_records is None else n_records)
    if n == 0:
        summary.flag("error", "class is empty")
        return summary

    mean, R = mean_vector(xyz)
    summary.resultant_length = R
    if mean is None:
        summary.flag("error", "resultant length vanishes, "
                     "mean direction is undefined")
        return summary

    summary.mean_vector = mean
    trend, plunge = cartesian_to_line(mean)[0]
    summary.mean_trend = float(trend)
    summary.mean_plunge = float(plunge)
    summary.mean_dip = 90.0 - summary.mean_plunge
    summary.mean_dip_direction = float(opposite_azimuth(summary.mean_trend))

    if n < SMALL_SAMPLE_SIZE:
        log_info(f"Class {label}: n = {n} < {SMALL_SAMPLE_SIZE}, "
                 "small-sample estimate of K")

    if n - R <= DEGENERACY_TOLERANCE * n:
        summary.fisher_k = math.inf
        summary.confidence_cone = 0.0
        summary.spherical_aperture = 0.0
        summary.flag("warning", "all vectors are parallel (n - R ~ 0), "
                     "K is infinite")
        if n < 2:
            summary.confidence_cone = math.nan
            summary.flag("warning", "confidence cone needs n >= 2")
        return summary

    summary.fisher_k = fisher_k(n, R)
    summary.spherical_aperture = spherical_aperture(n, summary.fisher_k)
    if math.isnan(summary.spherical_aperture):
        summary.flag("warning", "spherical aperture is undefined "
                     "for such a dispersed class")
    summary.confidence_cone = confidence_cone(n, R)
    if math.isnan(summary.confidence_cone):
        summary.flag("warning", "confidence cone is undefined "
                     "for such a dispersed class")
    return summary


def class_statistics(xyz, labels, n_records):
    """
    Fisher statistics for every label 1..max(labels).
    Labels without members are skipped.
    """
    summaries = []
    for label in range(1, int(labels.max()) + 1):
        mask = labels == label
        if not np.any(mask):
            log_warning(f"Class {label} has no members and is skipped")
            continue
        summaries.append(fisher_statistics(xyz[mask], label, n_records))
    log_info(f"Fisher statistics computed for {len(summaries)} classes")
    return summaries


def prune_upward_classes(summaries):
    """
    Drop the classes whose mean vector points upwards;
    their antipodal classes describe the same features.
    Classes without a defined mean are kept.
    """
    retained = [s for s in summaries if not s.is_upward]
    log_info(f"{len(summaries) - len(retained)} upward classes pruned, "
             f"{len(retained)} retained")
    return retained
