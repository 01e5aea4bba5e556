import numpy as np

from point_management import Point, points_are_equal

"""
performs serial (linear scan) queries over a plain list of points,
used to check and time the tree against a search without any index
"""


def _coordinate_matrix(points: list[Point]) -> np.ndarray:
    return np.array([point.coordinates for point in points], dtype=float)


def serial_search(
        points: list[Point],
        coords
) -> Point | None:
    for point in points:
        if points_are_equal(point.coordinates, coords):
            # found the point, therefore returns it
            return point
    return None # point is not in the list


def serial_range_query(points: list[Point], lower, upper) -> list[Point]:
    if not points:
        return []
    matrix = _coordinate_matrix(points)
    inside = np.all(
        (matrix >= np.asarray(lower, dtype=float)) & (matrix <= np.asarray(upper, dtype=float)),
        axis=1
    )
    return [points[i] for i in np.flatnonzero(inside)]


def serial_distances(points: list[Point], target) -> np.ndarray:
    if not points:
        return np.empty(0)
    return np.linalg.norm(_coordinate_matrix(points) - np.asarray(target, dtype=float), axis=1)


def serial_knn_query(points: list[Point], target, k: int) -> list[Point]:
    if k <= 0 or not points:
        return []
    # stable sort keeps insertion order between equal distances
    order = np.argsort(serial_distances(points, target), kind='stable')
    return [points[i] for i in order[:k]]


def serial_nearest_neighbor(points: list[Point], target) -> Point | None:
    nearest = serial_knn_query(points, target, 1)
    return nearest[0] if nearest else None
