from point_management import Point


class Node_Kdtree:

    def __init__(
            self,
            point: Point,
            left: 'Node_Kdtree | None' = None, # subtree holding smaller coordinates on the discriminator
            right: 'Node_Kdtree | None' = None # subtree holding greater or equal coordinates
        ):
        # the point can be replaced in place when the node
        # takes over the point of its successor during deletion
        self.point = point
        self.left = left
        self.right = right

    def __str__(self) -> str:
        output = 'node: ' + str(self.point) + \
                 ' left: ' + ('yes' if self.left is not None else 'no') + \
                 ' right: ' + ('yes' if self.right is not None else 'no')

        return output

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def coordinate(self, dimension: int) -> float:
        return self.point.get_coordinate(dimension)
