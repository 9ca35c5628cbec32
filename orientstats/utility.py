import logging
import datetime
import sys
import time

PERF = 15

logging.addLevelName(PERF, "PERF")
logger = logging.getLogger("orientstats")
formatter = logging.Formatter(
    "[%(levelname)s][%(asctime)s] %(name)s: %(message)s")

# ANSI escapes for the console
GREEN = '\033[92m'
YELLOW = '\033[93m'
BLUE = '\033[94m'
BOLD = '\033[1m'
RESET = '\033[0m'

if __debug__:
    logger.setLevel(logging.DEBUG)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
else:
    # optimized runs (python -O) log to a dated file
    logger.setLevel(logging.INFO)
    handler = logging.FileHandler("orientstats_" + datetime.datetime.now()
                                  .strftime("%Y-%m-%d_%H:%M:%S") + ".log")
    handler.setLevel(logging.INFO)
handler.setFormatter(formatter)
logger.addHandler(handler)


def log_info(msg):
    logger.info("%s", GREEN + msg + RESET)


def log_warning(msg):
    logger.warning("%s", YELLOW + msg + RESET)


class ValidationError(RuntimeError):
    """
    Malformed input: values out of range, unknown format code,
    unknown clustering mode. Aborts the run before any computation.
    """

    def __init__(self, msg, field=None):
        super().__init__(msg)
        self.field = field


class ClusteringDegeneracy(ValidationError):
    """
    Clustering cannot be carried out on the given vector set.
    """


class GoodnessOfFitError(RuntimeError):
    """
    Rotation singularity or failure of a goodness-of-fit test
    for a single class.
    """


class DegenerateClassWarning(UserWarning):
    """
    Fisher statistics of a class are undefined or infinite
    (n - R ~ 0, R ~ 0, n < 2).
    """


class Timer:
    """
    Context manager logging the wall time of a block at level PERF,
    labelled with the name of the calling function:
        with Timer() as _:
            <...code to be timed...>
    """

    def __init__(self):
        self.label = ""
        self.elapsed = None
        self._start = None

    def __enter__(self):
        self.label = sys._getframe(1).f_code.co_name
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self._start
        logger.log(PERF, "%s", f"{BLUE}{BOLD}[{self.label}]{RESET}{BLUE} "
                   f"elapsed {self.elapsed:.6f} seconds{RESET}")
