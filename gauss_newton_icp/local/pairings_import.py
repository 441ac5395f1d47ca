"""
Reads pairings from a YAML file of the following layout (all sections optional):

    pt2pt:  [{global: [x, y, z], local: [x, y, z]}, ...]
    pt2ln:  [{line: {point: [..], direction: [..]}, local: [..]}, ...]
    pt2pl:  [{plane: {centroid: [..], normal: [..]}, local: [..]}, ...]
    pl2pl:  [{global: {centroid: [..], normal: [..]}, local: {centroid: [..], normal: [..]}}, ...]
    ln2ln:  [{global: {point: [..], direction: [..]}, local: {point: [..], direction: [..]}}, ...]
    point_weights: [[block length, weight], ...]
"""
import yaml

from ..core.pairings import (
    Line,
    LinePair,
    Pairings,
    Plane,
    PlanePair,
    PointLinePair,
    PointPair,
    PointPlanePair,
)


def _line(d: dict) -> Line:
    return Line(point=d["point"], direction=d["direction"])


def _plane(d: dict) -> Plane:
    return Plane(centroid=d["centroid"], normal=d["normal"])


def _block_length(length) -> int:
    if isinstance(length, float) and not length.is_integer():
        raise ValueError(f"point weight block length {length} is not an integer")
    return int(length)


def pairings_from_dict(data: dict) -> Pairings:
    """
    :param data: dictionary in the layout described in the module docstring
    :return: the Pairings
    """
    try:
        return Pairings(
            pt2pt=[PointPair(global_point=p["global"], local_point=p["local"]) for p in data.get("pt2pt") or []],
            pt2ln=[PointLinePair(line=_line(p["line"]), local_point=p["local"]) for p in data.get("pt2ln") or []],
            pt2pl=[PointPlanePair(plane=_plane(p["plane"]), local_point=p["local"])
                   for p in data.get("pt2pl") or []],
            pl2pl=[PlanePair(global_plane=_plane(p["global"]), local_plane=_plane(p["local"]))
                   for p in data.get("pl2pl") or []],
            ln2ln=[LinePair(global_line=_line(p["global"]), local_line=_line(p["local"]))
                   for p in data.get("ln2ln") or []],
            point_weights=[(_block_length(length), float(weight))
                           for length, weight in data.get("point_weights") or []],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise Exception(f"Malformed pairings data, missing or invalid entry: {e}") from e


def load_pairings_yaml(filename) -> Pairings:
    with open(filename) as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise Exception("Could not read yaml.") from exc
    if loaded is None:
        return Pairings()
    if not isinstance(loaded, dict):
        raise Exception("The provided pairings file does not have the right format.")
    return pairings_from_dict(loaded)
