from abc import ABC, abstractmethod
import numpy as np
from matplotlib.patches import Circle
import matplotlib.pyplot as plt
from . contouring import DensityGrid
from . projection import ProjectionBase, EqualArea, EqualAngle
from . stereomath import lower_hemisphere
from . utility import Timer, log_info

PROJECTIONS = {"equal_area": EqualArea, "equal_angle": EqualAngle}

label_font = {"family": "sans-serif", "size": "12",
              "horizontalalignment": "center", "verticalalignment": "bottom"}
summary_font = {"family": "monospace", "size": "6",
                "verticalalignment": "top", "horizontalalignment": "left"}


class Stereonet:
    """
    Lower-hemisphere net collecting the plots of one classification.
    Plots carrying color data get their own color bar to the right
    of the net.
    """

    def __init__(self, projection="equal_area"):
        self.plots = []
        self.artists = {}
        self.info_text = ""
        self._next_color_bar = 0.6

        self.figure = plt.figure(figsize=(10, 6), facecolor="white")
        self.data_axes = self.figure.add_axes(
            [0.0, 0.0, 0.6, 0.98], xlim=(-1.1, 1.2), ylim=(-1.1, 1.1))
        if isinstance(projection, ProjectionBase):
            self.projection = projection
        elif projection in PROJECTIONS:
            self.projection = PROJECTIONS[projection]()
        else:
            raise RuntimeError(f"Unknown projection method {projection}.")
        self._draw_net()

    def _draw_net(self):
        ax = self.data_axes
        ax.set_aspect(aspect="equal", anchor="W")
        ax.set_axis_off()
        ax.add_patch(Circle((0, 0), radius=1, edgecolor="black",
                            facecolor="none"))
        ax.text(0.0, 1.02, "N", **label_font)
        # center and quadrant ticks
        ax.scatter([0, 1, 0, -1, 0], [0, 0, 1, 0, -1], s=100,
                   color="grey", marker='+')

    def project(self, data):
        return self.projection.project(data)

    def append_plot(self, plot):
        if plot in self.artists:
            raise RuntimeError(
                f"{type(plot).__name__} is already on the stereonet.")
        with Timer() as _:
            artist = plot.draw()
            if plot.has_color_bar:
                self._add_color_bar(artist, plot.dataset_to_plot.color_legend)
            self.plots.append(plot)
            self.artists[plot] = artist
        log_info(f"{type(plot).__name__} drawn with options "
                 f"{plot.plot_options}")
        return artist

    def _add_color_bar(self, artist, legend):
        caxis = self.figure.add_axes([self._next_color_bar, 0.05, 0.02, 0.4],
                                     anchor="SW")
        self._next_color_bar += 0.12
        bar = plt.colorbar(artist, cax=caxis, orientation="vertical")
        bar.set_label(legend)
        caxis.yaxis.set_label_position("left")

    def generate_plots(self, show_plot=True):
        '''
        Add the legend of the class markers and the summary text
        '''
        if self.data_axes.get_legend_handles_labels()[0]:
            self.data_axes.legend(loc="upper right")
        lines = [self.info_text] + [plot.info_text() for plot in self.plots]
        self.data_axes.text(1.05, 0.95, "\n".join(lines),
                            transform=self.data_axes.transAxes,
                            **summary_font)
        if show_plot:
            plt.show()

    def save_plot(self, fname, **kwargs):
        self.figure.savefig(fname, **kwargs)
        log_info(f"Stereonet saved to {fname}")

    def close(self):
        plt.close(self.figure)


class PlotBase(ABC):
    """
    Something drawn on a Stereonet.
    Subclasses fill the defaults of their matplotlib keyword options.
    """
    has_color_bar = False
    default_options = {}

    def __init__(self, stereonet, data, **kwargs):
        self.stereonet = stereonet
        self.dataset_to_plot = data
        self.plot_options = dict(self.default_options, **kwargs)

    @abstractmethod
    def draw(self):
        return

    @abstractmethod
    def info_text(self):
        return


class ContourPlot(PlotBase):
    """
    Density contours of a DensityGrid, interpolated between
    the grid nodes
    """
    has_color_bar = True
    default_options = {"n_intervals": 5, "filled": True, "cmap": "Reds"}

    def __init__(self, stereonet, density_grid, **kwargs):
        if not isinstance(density_grid, DensityGrid):
            raise RuntimeError("ContourPlot needs a DensityGrid.")
        super().__init__(stereonet, density_grid, **kwargs)

    def draw(self):
        opt = dict(self.plot_options)
        n_intervals = opt.pop("n_intervals")
        filled = opt.pop("filled")
        grid = self.dataset_to_plot
        x, y = self.stereonet.project(grid.nodes).T
        top = grid.max_density if grid.max_density > 0.0 else 1.0
        levels = np.linspace(0.0, top, n_intervals + 1)
        contour = self.stereonet.data_axes.tricontourf if filled \
            else self.stereonet.data_axes.tricontour
        return contour(x, y, grid.color_data, levels, **opt)

    def info_text(self):
        grid = self.dataset_to_plot
        return f"Density of \"{grid.data_legend}\", " \
            f"{grid.counting_method}, max {grid.max_density:.2f}%."


class ClassPlot(PlotBase):
    """
    Poles of one retained class and its Fisher mean.
    Reflected members are drawn as the poles they stand for.
    """
    default_options = {"marker": 'o', "s": 9}

    def __init__(self, stereonet, report, **kwargs):
        self.report = report
        super().__init__(stereonet, report.density.dataset_to_contour,
                         **kwargs)

    def draw(self):
        ax = self.stereonet.data_axes
        x, y = self.stereonet.project(
            lower_hemisphere(self.dataset_to_plot)).T
        poles = ax.scatter(x, y, label=f"Class {self.report.label}",
                           **self.plot_options)
        summary = self.report.summary
        if summary.has_mean:
            xm, ym = self.stereonet.project(summary.mean_vector).T
            ax.scatter(xm, ym, marker='D', s=36, facecolor="white",
                       edgecolor="black", linewidths=2)
        return poles

    def info_text(self):
        s = self.report.summary
        return f"Class {s.label}: {s.n} poles, mean {s.mean_dip:.1f}/"\
            f"{s.mean_dip_direction:.1f}, K = {s.fisher_k:.2f}"


def plot_classification(result, fname=None, show_plot=False):
    """
    Density contours of the whole dataset with the poles and means
    of the retained classes, and the run summary as info text.
    """
    net = Stereonet()
    net.append_plot(ContourPlot(net, result.global_density))
    for report in result.reports:
        net.append_plot(ClassPlot(net, report))
    net.info_text = result.summary_text()
    net.generate_plots(show_plot=show_plot)
    if fname is not None:
        net.save_plot(fname)
    return net
