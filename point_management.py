import math

from kd_errors import CoordinateIndexError, DimensionMismatchError

# two coordinates closer than this are considered the same
TOLERANCE = 1e-10


def points_are_equal(point1, point2) -> bool:
    """
    Checks if two n-dimensional coordinate vectors are equal

    Two vectors are equal when they have the same length and every
    pair of coordinates differs by at most TOLERANCE

    :param point1: first coordinate vector
    :type point1: sequence of float
    :param point2: second coordinate vector
    :type point2: sequence of float

    :return: True if the vectors are equal
    :rtype: bool
    """
    if len(point1) != len(point2):
        return False
    for i in range(len(point1)):
        if abs(point1[i] - point2[i]) > TOLERANCE:
            return False
    return True


class Point:

    def __init__(
            self,
            coordinates, # the coordinates of the point, their number never changes
            value: str = '' # the label stored together with the coordinates
        ):
        self._coordinates: list[float] = [float(c) for c in coordinates]
        self.value = value

    @property
    def coordinates(self) -> tuple:
        return tuple(self._coordinates)

    @property
    def dimensions(self) -> int:
        return len(self._coordinates)

    def __len__(self) -> int:
        return len(self._coordinates)

    def get_coordinate(self, dimension: int) -> float:
        self._check_dimension(dimension)
        return self._coordinates[dimension]

    def set_coordinate(self, dimension: int, value: float):
        self._check_dimension(dimension)
        self._coordinates[dimension] = float(value)

    def get_value(self) -> str:
        return self.value

    def set_value(self, value: str):
        self.value = value

    def _check_dimension(self, dimension: int):
        # negative indices are rejected, they are not counted from the end
        if dimension < 0 or dimension >= len(self._coordinates):
            raise CoordinateIndexError(dimension, len(self._coordinates))

    def distance_to(self, other) -> float:
        """
        Euclidean distance between this point and either another
        Point or a bare sequence of coordinates

        :raises DimensionMismatchError: if the two have a different
                                        number of coordinates
        """
        other_coords = other._coordinates if isinstance(other, Point) else other
        if len(other_coords) != len(self._coordinates):
            raise DimensionMismatchError(
                len(self._coordinates), len(other_coords), what='Coordinates'
            )
        return math.sqrt(sum((a - b) ** 2 for a, b in zip(self._coordinates, other_coords)))

    def copy(self) -> 'Point':
        return Point(self._coordinates, self.value)

    # equality only looks at the coordinates, the value is ignored
    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return points_are_equal(self._coordinates, other._coordinates)

    __hash__ = None

    def __str__(self) -> str:
        output = 'Point(' + ', '.join(str(c) for c in self._coordinates) + ') = ' + str(self.value)

        return output

    def __repr__(self) -> str:
        return f'Point({self._coordinates!r}, {self.value!r})'
