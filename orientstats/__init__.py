from orientstats.dataset import OrientationData, DIPDIR_DIP, DIP_DIPDIR, \
    TREND_PLUNGE, PLUNGE_TREND
from orientstats.stereomath import *
from orientstats.projection import EqualArea, EqualAngle
from orientstats.contouring import CountingGrid, DensityGrid, COUNTING_CONE
from orientstats.clustering import KMedoids, cluster_manual, \
    cluster_automatic, seeds_from_projection
from orientstats.statistics import FisherSummary, fisher_statistics, \
    class_statistics, prune_upward_classes
from orientstats.goodness_of_fit import FisherGoodnessOfFit, \
    fisher_goodness_of_fit
from orientstats.export import ClassificationExporter
from orientstats.file_io import read_orientation_table
from orientstats.analysis import AnalysisOptions, OrientationAnalysis, \
    ClassificationResult, ClassReport
from orientstats.utility import ValidationError, ClusteringDegeneracy, \
    GoodnessOfFitError, DegenerateClassWarning

from orientstats.stereonet import Stereonet, ContourPlot, ClassPlot, \
    plot_classification
