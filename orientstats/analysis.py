import os

from . dataset import OrientationData, DIPDIR_DIP, check_input_format
from . contouring import DensityGrid
from . clustering import cluster_manual, cluster_automatic, \
    seeds_from_projection
from . statistics import Issue, class_statistics, prune_upward_classes
from . goodness_of_fit import fisher_goodness_of_fit, SIGNIFICANCE
from . export import ClassificationExporter
from . file_io import read_orientation_table
from . utility import Timer, log_info, log_warning, \
    ValidationError, GoodnessOfFitError

CLUSTERING_MODES = ("manual", "automatic")


class AnalysisOptions:
    """
    Options of one clustering run.
    input_format:    format code of the table, None keeps the current one
    clustering_mode: "manual" (seeds and/or picks) or "automatic"
    seeds:           list of (plunge, trend) in degrees
    picks:           list of (x, y) points on the equal-area net
    class_count:     number of classes for the automatic mode
    random_state, n_init, max_iter: k-medoids settings
    significance:    level of the goodness-of-fit tests
    """

    def __init__(self, **kwargs):
        self.parse_options(kwargs)

    def parse_options(self, opts):
        self.input_format = opts.get("input_format", None)
        if self.input_format is not None:
            check_input_format(self.input_format)
            self.input_format = int(self.input_format)
        self.clustering_mode = opts.get("clustering_mode", "manual")
        if self.clustering_mode not in CLUSTERING_MODES:
            raise ValidationError(
                f"Unknown clustering mode {self.clustering_mode!r}, "
                f"expected one of {CLUSTERING_MODES}",
                field="clustering_mode")
        seeds = list(opts.get("seeds", None) or [])
        picks = opts.get("picks", None)
        if picks is not None and len(picks) > 0:
            seeds.extend(seeds_from_projection(picks))
        self.seeds = seeds
        self.class_count = opts.get("class_count", 1)
        self.random_state = opts.get("random_state", None)
        self.n_init = opts.get("n_init", 3)
        self.max_iter = opts.get("max_iter", 100)
        self.significance = opts.get("significance", SIGNIFICANCE)

    def clustering_kwargs(self):
        kwargs = {"max_iter": self.max_iter}
        if self.clustering_mode == "automatic":
            kwargs["n_init"] = self.n_init
            kwargs["random_state"] = self.random_state
        return kwargs

    def __repr__(self):
        if self.clustering_mode == "manual":
            return f"AnalysisOptions(manual, seeds={self.seeds})"
        return f"AnalysisOptions(automatic, class_count={self.class_count})"


class ClassReport:
    """
    Everything computed for one retained class. The status is
    "ok", "warning" or "error" after the most severe issue.
    """

    def __init__(self, summary):
        self.summary = summary
        self.goodness_of_fit = None
        self.density = None
        self.issues = list(summary.issues)

    @property
    def label(self):
        return self.summary.label

    @property
    def status(self):
        severities = {issue.severity for issue in self.issues}
        if "error" in severities:
            return "error"
        if "warning" in severities:
            return "warning"
        return "ok"

    def add_issue(self, severity, kind, detail):
        self.issues.append(Issue(severity, kind, detail))
        log_warning(f"Class {self.label}: {detail}")


class ClassificationResult:
    """
    Outcome of one clustering run
    """

    def __init__(self, dataset, options, model, global_density):
        self.dataset = dataset
        self.options = options
        self.model = model
        self.labels = model.labels_
        self.global_density = global_density
        self.summaries = []
        self.reports = []

    @property
    def n_classes(self):
        return len(self.reports)

    @property
    def retained_labels(self):
        return [report.label for report in self.reports]

    @property
    def warnings(self):
        '''
        All issues of the retained classes, as (label, Issue) pairs
        '''
        return [(report.label, issue) for report in self.reports
                for issue in report.issues]

    def report(self, label):
        for report in self.reports:
            if report.label == label:
                return report
        raise KeyError(f"Class {label} is not retained")

    def export(self):
        return ClassificationExporter(self.dataset, self.labels,
                                      self.retained_labels)

    def summary_text(self):
        rows = [
            ("Class ID", "{:12d}", lambda r: r.summary.label),
            ("Poles in class", "{:12d}", lambda r: r.summary.n),
            ("% of total", "{:12.2f}", lambda r: r.summary.n_percent),
            ("Mean Dir", "{:12.2f}", lambda r: r.summary.mean_dip_direction),
            ("Mean Dip", "{:12.2f}", lambda r: r.summary.mean_dip),
            ("K", "{:12.2f}", lambda r: r.summary.fisher_k),
            ("99% conf. cone angle", "{:12.2f}",
             lambda r: r.summary.confidence_cone),
            ("68.26% variability sph. apert.", "{:12.2f}",
             lambda r: r.summary.spherical_aperture),
            ("Max conc. % of class per 1% area", "{:12.2f}",
             lambda r: r.density.max_density),
        ]
        lines = []
        for name, fmt, getter in rows:
            values = "".join(fmt.format(getter(r)) for r in self.reports)
            lines.append(f"{name:>32} = {values}")
        lines.append("")
        lines.append("{:>32} = {:12.2f}".format(
            "Max conc. % of total per 1% area",
            self.global_density.max_density))
        for report in self.reports:
            if report.goodness_of_fit is not None:
                for line in report.goodness_of_fit.report_lines():
                    lines.append(f"Class {report.label}: {line}")
        for label, issue in self.warnings:
            lines.append(f"Class {label} {issue.severity.upper()}: "
                         f"{issue.detail}")
        return "\n".join(lines)


class OrientationAnalysis:
    """
    Clustering and Fisher statistics of a table of orientation data.
    The table is validated and converted to dual-hemisphere vectors once;
    every call to run() is an independent clustering of the same data.
    """

    def __init__(self, table, input_format=DIPDIR_DIP, data_legend=None):
        self._table = table
        self._data_legend = data_legend
        self.load(input_format)

    def load(self, input_format):
        '''
        Build the vectors and the global density grid from the table
        '''
        self.dataset = OrientationData()
        self.dataset.load_data(self._table, input_format, self._data_legend)
        self.global_density = DensityGrid(self.dataset)
        log_info("Maximum concentration {0:.2f} % of total per 1% area".
                 format(self.global_density.max_density))

    @classmethod
    def from_file(cls, fname, input_format=DIPDIR_DIP, **kwargs):
        table = read_orientation_table(fname, **kwargs)
        return cls(table, input_format,
                   data_legend=os.path.splitext(fname)[0])

    def run(self, options=None, **kwargs):
        '''
        Cluster, compute the class statistics, prune the upward
        classes and test the retained ones against the Fisher distribution.
        Options are an AnalysisOptions or keyword arguments for one.
        '''
        if options is None:
            options = AnalysisOptions(**kwargs)
        if options.input_format is not None and \
                options.input_format != self.dataset.input_format:
            self.load(options.input_format)
        vectors = self.dataset.data

        with Timer() as _:
            if options.clustering_mode == "manual":
                model = cluster_manual(vectors, options.seeds,
                                       **options.clustering_kwargs())
            else:
                model = cluster_automatic(vectors, options.class_count,
                                          **options.clustering_kwargs())

            result = ClassificationResult(self.dataset, options, model,
                                          self.global_density)
            result.summaries = class_statistics(vectors, model.labels_,
                                                self.dataset.n_records)
            for summary in prune_upward_classes(result.summaries):
                result.reports.append(
                    self._class_report(summary, model.labels_, options))

        n_failed = sum(report.status == "error" for report in result.reports)
        log_info(f"Run with {options} done: {result.n_classes} classes, "
                 f"{n_failed} with errors")
        return result

    def _class_report(self, summary, labels, options):
        report = ClassReport(summary)
        mask = labels == summary.label
        report.density = DensityGrid(self.dataset.subset(
            mask, f"Class {summary.label}"))
        try:
            report.goodness_of_fit = fisher_goodness_of_fit(
                self.dataset.data[mask], summary, options.significance)
        except GoodnessOfFitError as e:
            report.add_issue("error", GoodnessOfFitError.__name__,
                             f"GOF test failed: {e}")
        return report

    def iterate(self, option_sequence, accept):
        '''
        Re-cluster with each options in turn until accept(result)
        is true; return the last result.
        '''
        result = None
        for options in option_sequence:
            if not isinstance(options, AnalysisOptions):
                options = AnalysisOptions(**options)
            result = self.run(options)
            if accept(result):
                break
        if result is None:
            raise ValidationError("No clustering options were given",
                                  field="options")
        return result
