from dataclasses import dataclass, field

import numpy as np


def _as_point(p) -> np.ndarray:
    p = np.asarray(p, dtype=float).reshape(3)
    return p


def _as_unit(v) -> np.ndarray:
    v = _as_point(v)
    n = np.linalg.norm(v)
    if n == 0:
        raise ValueError("Direction/normal vector must not be zero.")
    return v / n


@dataclass(frozen=True, eq=False)
class Line:
    point: np.ndarray
    direction: np.ndarray

    def __post_init__(self):
        # frozen dataclass, so bypass __setattr__ to store the normalized arrays
        object.__setattr__(self, "point", _as_point(self.point))
        object.__setattr__(self, "direction", _as_unit(self.direction))


@dataclass(frozen=True, eq=False)
class Plane:
    centroid: np.ndarray
    normal: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "centroid", _as_point(self.centroid))
        object.__setattr__(self, "normal", _as_unit(self.normal))


@dataclass(frozen=True, eq=False)
class PointPair:
    global_point: np.ndarray
    local_point: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "global_point", _as_point(self.global_point))
        object.__setattr__(self, "local_point", _as_point(self.local_point))


@dataclass(frozen=True, eq=False)
class PointLinePair:
    line: Line  # in the global frame
    local_point: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "local_point", _as_point(self.local_point))


@dataclass(frozen=True, eq=False)
class PointPlanePair:
    plane: Plane  # in the global frame
    local_point: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "local_point", _as_point(self.local_point))


@dataclass(frozen=True, eq=False)
class PlanePair:
    global_plane: Plane
    local_plane: Plane


@dataclass(frozen=True, eq=False)
class LinePair:
    global_line: Line
    local_line: Line


@dataclass
class Pairings:
    """
    All correspondences between a "global" (reference) and a "local" scan.
    The sought transformation maps local coordinates into the global frame.

    `point_weights` optionally partitions `pt2pt` into contiguous blocks, given as
    (block length, weight) in index order. If used, the block lengths must sum to len(pt2pt).
    """
    pt2pt: list[PointPair] = field(default_factory=list)
    pt2ln: list[PointLinePair] = field(default_factory=list)
    pt2pl: list[PointPlanePair] = field(default_factory=list)
    pl2pl: list[PlanePair] = field(default_factory=list)
    ln2ln: list[LinePair] = field(default_factory=list)
    point_weights: list[tuple[int, float]] = field(default_factory=list)

    def size(self) -> int:
        return len(self.pt2pt) + len(self.pt2ln) + len(self.pt2pl) + len(self.pl2pl) + len(self.ln2ln)

    def empty(self) -> bool:
        return self.size() == 0

    def contents_summary(self) -> str:
        if self.empty():
            return "none"
        parts = []
        for name in ("pt2pt", "pt2ln", "pt2pl", "pl2pl", "ln2ln"):
            n = len(getattr(self, name))
            if n:
                parts.append(f"{n} {name}")
        return ", ".join(parts)

    def point_pair_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """
        :return: (local, global) points of all point-to-point pairings as two (N, 3) arrays.
        """
        local = np.array([p.local_point for p in self.pt2pt]).reshape(-1, 3)
        glob = np.array([p.global_point for p in self.pt2pt]).reshape(-1, 3)
        return local, glob
