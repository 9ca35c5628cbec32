"""
Goodness-of-fit of a class of vectors to the Fisher distribution, after
Fisher, Lewis and Embleton (1987), Statistical analysis of spherical data,
Cambridge University Press.

The class is rotated twice so that its mean direction becomes the pole of
the new frame, and three tests are run on the rotated colatitude (theta)
and azimuth (phi):
    1 - cos(theta)             ~ Exponential with mean 1/K   (Kolmogorov-Smirnov)
    phi                        ~ Uniform(0, 2 pi)            (Kuiper)
    phi' * sqrt(sin(theta'))   ~ Normal(0, s)                (Kolmogorov-Smirnov)
The standard deviation s of the last test is estimated from the tested
sample itself, so that test only checks the shape of the distribution.
"""
from collections import namedtuple
import math
import numpy as np
from scipy import stats
from scipy.spatial.transform import Rotation
from astropy.stats import kuiper

from . stereomath import line_to_cartesian
from . utility import log_info, GoodnessOfFitError

SIGNIFICANCE = 0.05

# pole of the first rotated frame
FIRST_POLE = np.array([0.0, 0.0, 1.0])
# pole of the second rotated frame: plunge 3/2 pi, trend -pi
SECOND_POLE = line_to_cartesian(
    [[math.degrees(-math.pi), math.degrees(1.5 * math.pi)]])[0]

TestOutcome = namedtuple(
    "TestOutcome", ["name", "statistic", "pvalue", "accepted"])


def alignment_rotation(mean, pole):
    """
    Rotation taking the unit vector mean onto pole,
    about the axis normal to both.
    """
    mean = np.asarray(mean, dtype=np.double)
    angle = math.acos(float(np.clip(np.dot(mean, pole), -1.0, 1.0)))
    sin_angle = math.sin(angle)
    if abs(sin_angle) < 1.0e-12:
        raise GoodnessOfFitError(
            "Mean direction is parallel to the reference pole, "
            "the rotation axis is undefined")
    axis = np.cross(mean, pole) / sin_angle
    return Rotation.from_rotvec(axis * angle)


def rotated_polar_coordinates(xyz, rotation):
    """
    Colatitude theta and azimuth phi (radians) of the rotated vectors
    """
    rotated = rotation.apply(xyz)
    theta = np.arccos(np.clip(rotated[:, 2], -1.0, 1.0))
    phi = np.arctan2(rotated[:, 1], rotated[:, 0])
    return theta, phi


def _outcome(name, statistic, pvalue, significance):
    if not (np.isfinite(statistic) and np.isfinite(pvalue)):
        raise GoodnessOfFitError(f"{name} test returned non-finite values")
    return TestOutcome(name, float(statistic), float(pvalue),
                       bool(pvalue >= significance))


class FisherGoodnessOfFit:
    """
    The three goodness-of-fit tests of a class against the Fisher
    distribution with concentration fisher_k.
    """

    def __init__(self, xyz, mean, fisher_k, significance=SIGNIFICANCE):
        xyz = np.asarray(xyz, dtype=np.double)
        if xyz.shape[0] < 3:
            raise GoodnessOfFitError(
                f"At least 3 vectors are needed, got {xyz.shape[0]}")
        if mean is None:
            raise GoodnessOfFitError("Mean direction is undefined")
        if not (math.isfinite(fisher_k) and fisher_k > 0.0):
            raise GoodnessOfFitError(f"Fisher K = {fisher_k} cannot be tested")
        self.fisher_k = fisher_k
        self.significance = significance

        self.theta, self.phi = rotated_polar_coordinates(
            xyz, alignment_rotation(mean, FIRST_POLE))
        self.theta_second, phi_second = rotated_polar_coordinates(
            xyz, alignment_rotation(mean, SECOND_POLE))
        self.phi_second = phi_second - 2.0 * math.pi * (phi_second > math.pi)

        self.radial = self.exponential_test()
        self.azimuthal = self.uniform_test()
        self.normal = self.normal_test()

    @property
    def outcomes(self):
        return [self.radial, self.azimuthal, self.normal]

    @property
    def colatitude_sample(self):
        return 1.0 - np.cos(self.theta)

    @property
    def azimuth_sample(self):
        return self.phi + 2.0 * math.pi * (self.phi < 0.0)

    @property
    def normal_sample(self):
        return self.phi_second * np.sqrt(np.sin(self.theta_second))

    def exponential_test(self):
        '''
        Kolmogorov-Smirnov test of 1 - cos(theta) against E(1/K)
        '''
        try:
            result = stats.kstest(self.colatitude_sample, "expon",
                                  args=(0.0, 1.0 / self.fisher_k))
        except (ValueError, FloatingPointError) as e:
            raise GoodnessOfFitError(f"Exponential test failed: {e}") from e
        return _outcome("exponential", result.statistic, result.pvalue,
                        self.significance)

    def uniform_test(self):
        '''
        Kuiper test of phi against U(0, 2 pi)
        '''
        uniform = stats.uniform(loc=0.0, scale=2.0 * math.pi)
        try:
            V, fpp = kuiper(self.azimuth_sample, uniform.cdf)
        except (ValueError, FloatingPointError) as e:
            raise GoodnessOfFitError(f"Uniform test failed: {e}") from e
        return _outcome("uniform", V, float(np.clip(fpp, 0.0, 1.0)),
                        self.significance)

    def normal_test(self):
        '''
        Kolmogorov-Smirnov test of phi' sqrt(sin(theta'))
        against N(0, s) with s the sample standard deviation
        '''
        sample = self.normal_sample
        sigma = float(np.std(sample, ddof=1))
        if not (math.isfinite(sigma) and sigma > 0.0):
            raise GoodnessOfFitError(
                "Normal test sample has no spread")
        try:
            result = stats.kstest(sample, "norm", args=(0.0, sigma))
        except (ValueError, FloatingPointError) as e:
            raise GoodnessOfFitError(f"Normal test failed: {e}") from e
        return _outcome("normal", result.statistic, result.pvalue,
                        self.significance)

    def report_lines(self):
        labels = {"exponential": "Exponential dist. E(1/K)",
                  "uniform": "Uniform dist. U(0, 2pi)",
                  "normal": "Normal dist. N(0, s)"}
        lines = []
        for outcome in self.outcomes:
            verdict = "ACCEPTED" if outcome.accepted else "REJECTED"
            lines.append(f"{labels[outcome.name]} {verdict} at "
                         f"{self.significance:.0%} sign. "
                         f"with P-value = {outcome.pvalue:.4g}")
        return lines


def fisher_goodness_of_fit(xyz, summary, significance=SIGNIFICANCE):
    """
    Run the goodness-of-fit tests of a class described by its
    FisherSummary. Raises GoodnessOfFitError on failure.
    """
    gof = FisherGoodnessOfFit(xyz, summary.mean_vector, summary.fisher_k,
                              significance)
    log_info(f"Class {summary.label} goodness of fit: " +
             "; ".join(gof.report_lines()))
    return gof
