# Every error raised by the index derives from KdtreeError and from
# the builtin exception that matches its meaning


class KdtreeError(Exception):
    pass


class InvalidDimensionsError(KdtreeError, ValueError):
    # raised when a tree is constructed with a non positive
    # number of dimensions
    pass


class DimensionMismatchError(KdtreeError, ValueError):

    def __init__(self, expected: int, received: int, what: str = 'Point'):
        self.expected = expected
        self.received = received
        super().__init__(
            f'{what} dimensions ({received}) do not match '
            f'tree dimensions ({expected})'
        )


class CoordinateIndexError(KdtreeError, IndexError):

    def __init__(self, dimension: int, point_dim: int):
        self.dimension = dimension
        self.point_dim = point_dim
        super().__init__(
            f'Dimension {dimension} out of range for a point '
            f'of {point_dim} dimensions'
        )


class EmptyTreeError(KdtreeError, LookupError):
    pass
