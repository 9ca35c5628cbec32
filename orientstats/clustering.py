import math
import numpy as np
from scipy.spatial.distance import cdist

from . stereomath import line_to_cartesian
from . projection import EqualArea
from . utility import Timer, log_info, log_warning, \
    ValidationError, ClusteringDegeneracy


def _distinct_count(vectors, decimals=12):
    return np.unique(np.round(vectors, decimals), axis=0).shape[0]


class KMedoids:
    """
    k-medoids clustering with the alternating (Voronoi iteration) scheme:
    every vector is assigned to the closest medoid, then every medoid
    is moved to the member with the smallest total distance to the
    other members of its cluster, until the assignment is stable.
    Distances are Euclidean, which for unit vectors is a monotonic
    function of the angle between them.
    Labels are numbered from 1 to n_clusters.
    """

    def __init__(self, n_clusters=2, max_iter=100, n_init=3,
                 random_state=None):
        self.n_clusters = int(n_clusters)
        self.max_iter = max_iter
        self.n_init = max(1, int(n_init))
        self.random_state = random_state
        self.labels_ = None
        self.medoid_indices_ = None
        self.cluster_centers_ = None
        self.inertia_ = None
        self.n_iter_ = 0

    def fit(self, vectors, initial_medoids=None):
        '''
        Cluster the N x 3 vectors.
        If initial_medoids (indices into vectors) are given,
        a single run is started from them.
        '''
        vectors = np.asarray(vectors, dtype=np.double)
        if vectors.ndim != 2 or vectors.shape[0] == 0:
            raise ClusteringDegeneracy(
                f"Cannot cluster a vector set of shape {vectors.shape}")

        if initial_medoids is not None:
            medoids = np.asarray(initial_medoids, dtype=int)
            self.n_clusters = medoids.shape[0]
            runs = [self._run(vectors, medoids)]
        else:
            n_distinct = _distinct_count(vectors)
            if self.n_clusters > n_distinct:
                log_warning(
                    f"{self.n_clusters} classes requested but only "
                    f"{n_distinct} distinct directions exist, "
                    f"class count reduced to {n_distinct}")
                self.n_clusters = n_distinct
            rng = np.random.default_rng(self.random_state)
            runs = [self._run(vectors, self._init_medoids(vectors, rng))
                    for _ in range(self.n_init)]

        labels, medoids, inertia, n_iter = min(runs, key=lambda r: r[2])
        self.labels_ = labels + 1
        self.medoid_indices_ = medoids
        self.cluster_centers_ = vectors[medoids]
        self.inertia_ = inertia
        self.n_iter_ = n_iter
        return self

    def fit_predict(self, vectors, initial_medoids=None):
        return self.fit(vectors, initial_medoids).labels_

    def _init_medoids(self, vectors, rng):
        """
        k-means++ style seeding restricted to data points:
        each new medoid is drawn with probability proportional
        to the squared distance to the closest medoid so far.
        """
        n = vectors.shape[0]
        medoids = [int(rng.integers(n))]
        closest = cdist(vectors, vectors[medoids]).ravel() ** 2
        for _ in range(1, self.n_clusters):
            weights = closest / closest.sum()
            new = int(rng.choice(n, p=weights))
            medoids.append(new)
            closest = np.minimum(
                closest, cdist(vectors, vectors[[new]]).ravel() ** 2)
        return np.array(medoids, dtype=int)

    def _run(self, vectors, medoids):
        medoids = medoids.copy()
        labels = None
        n_iter = 0
        for n_iter in range(1, self.max_iter + 1):
            new_labels = cdist(vectors, vectors[medoids]).argmin(axis=1)
            if labels is not None and np.array_equal(new_labels, labels):
                break
            labels = new_labels
            medoids = self._update_medoids(vectors, labels, medoids)
        else:
            log_warning(f"k-medoids did not converge in {self.max_iter} "
                        "iterations")
        inertia = float(np.linalg.norm(
            vectors - vectors[medoids[labels]], axis=1).sum())
        return labels, medoids, inertia, n_iter

    @staticmethod
    def _update_medoids(vectors, labels, medoids):
        new_medoids = medoids.copy()
        for c, current in enumerate(medoids):
            members = np.flatnonzero(labels == c)
            if members.size == 0:
                # duplicated seeds leave empty clusters; keep the medoid
                continue
            cost = cdist(vectors[members], vectors[members]).sum(axis=1)
            best = int(cost.argmin())
            position = np.flatnonzero(members == current)
            if position.size and cost[position[0]] <= cost[best]:
                continue
            new_medoids[c] = members[best]
        return new_medoids


def manual_seed_vectors(seeds=None):
    '''
    Direction cosines of the (plunge, trend) seeds in degrees,
    followed by their reflections.
    Without seeds a single horizontal seed towards north is used.
    '''
    if seeds is None or len(seeds) == 0:
        seeds = [(0.0, 0.0)]
    seeds = np.atleast_2d(np.asarray(seeds, dtype=np.double))
    if seeds.shape[1] != 2:
        raise ValidationError(
            f"Seeds must be (plunge, trend) pairs, got shape {seeds.shape}",
            field="seeds")
    seed_vectors = line_to_cartesian(seeds[:, ::-1])
    return np.vstack((seed_vectors, -seed_vectors))


def snap_to_data(seed_vectors, vectors):
    '''
    Index of the data vector closest to each seed;
    ties go to the first occurrence.
    '''
    return np.array([int(np.linalg.norm(vectors - seed, axis=1).argmin())
                     for seed in seed_vectors], dtype=int)


def seeds_from_projection(xy, projection=None):
    '''
    Convert points picked on the net into (plunge, trend) seeds
    '''
    projection = EqualArea() if projection is None else projection
    trend_plunge = projection.inverse(xy)
    return [(float(p), float(t)) for t, p in trend_plunge]


def resolve_class_count(class_count):
    '''
    Number of dual-hemisphere classes for an automatic run:
    at least one, rounded half up, then doubled.
    '''
    try:
        class_count = float(class_count)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid class count {class_count!r}",
                              field="class_count") from None
    if not math.isfinite(class_count):
        raise ValidationError(f"Invalid class count {class_count!r}",
                              field="class_count")
    class_count = max(class_count, 1.0)
    return int(math.floor(class_count + 0.5)) * 2


def cluster_manual(vectors, seeds=None, **kwargs):
    '''
    k-medoids started from user seeds snapped to the nearest data vectors
    '''
    with Timer() as _:
        seed_vectors = manual_seed_vectors(seeds)
        initial = snap_to_data(seed_vectors, vectors)
        if np.unique(initial).size < initial.size:
            log_warning("Several seeds share the same closest data vector")
        model = KMedoids(n_clusters=initial.size, **kwargs)
        model.fit(vectors, initial_medoids=initial)
    log_info(f"Manual k-medoids: {model.n_clusters} classes "
             f"from {seed_vectors.shape[0] // 2} seeds, "
             f"{model.n_iter_} iterations")
    return model


def cluster_automatic(vectors, class_count=1, **kwargs):
    '''
    k-medoids with automatic seeding for class_count classes
    per hemisphere
    '''
    with Timer() as _:
        model = KMedoids(n_clusters=resolve_class_count(class_count),
                         **kwargs)
        model.fit(vectors)
    log_info(f"Automatic k-medoids: {model.n_clusters} classes, "
             f"{model.n_iter_} iterations")
    return model
