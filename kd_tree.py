import heapq
import itertools
import logging

import numpy as np

from kd_errors import (
    CoordinateIndexError,
    DimensionMismatchError,
    EmptyTreeError,
    InvalidDimensionsError,
)
from node_management import Node_Kdtree
from point_management import Point, points_are_equal

logger = logging.getLogger(__name__)


class Kdtree:

    def __init__(self,
            dimensions: int,
            points = None
        ):
        # bool is an int subclass but never a meaningful dimensionality
        if isinstance(dimensions, bool) \
                or not isinstance(dimensions, (int, np.integer)) \
                or dimensions <= 0:
            raise InvalidDimensionsError(
                f'Dimensions must be a positive integer, got {dimensions!r}'
            )
        self.dimensions = int(dimensions)
        self.root: Node_Kdtree | None = None

        # number of nodes is kept up to date by every
        # mutating operation so size() does not walk the tree
        self.num_of_nodes = 0

        if points is not None:
            self.bulk_loading(points)


    def _check_dimensions(self, coords, what: str = 'Point'):
        if len(coords) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(coords), what)

    # a query target can be a Point or a plain sequence of coordinates
    @staticmethod
    def _as_coordinates(point_or_coords) -> tuple:
        if isinstance(point_or_coords, Point):
            return point_or_coords.coordinates
        return tuple(float(c) for c in point_or_coords)

    def _discriminator(self, depth: int) -> int:
        return depth % self.dimensions


    def insert(self, point: Point):
        """
        Inserts a copy of @param point in the tree

        The point descends from the root, going left when its coordinate
        on the discriminator of the current node is strictly smaller and
        right otherwise, until an empty slot is found. No rebalancing
        takes place.

        :raises DimensionMismatchError: if the point does not have
                                        the dimensions of the tree
        """
        self._check_dimensions(point)
        coords = point.coordinates
        new_node = Node_Kdtree(point.copy())

        if self.root is None:
            self.root = new_node
        else:
            current_node = self.root
            depth = 0
            while True:
                k = self._discriminator(depth)
                if coords[k] < current_node.coordinate(k):
                    if current_node.left is None:
                        current_node.left = new_node
                        break
                    current_node = current_node.left
                else:
                    if current_node.right is None:
                        current_node.right = new_node
                        break
                    current_node = current_node.right
                depth += 1

        self.num_of_nodes += 1


    def _find_node(self, coords) -> Node_Kdtree | None:
        current_node = self.root
        depth = 0
        while current_node is not None:
            if points_are_equal(coords, current_node.point.coordinates):
                return current_node
            k = self._discriminator(depth)
            if coords[k] < current_node.coordinate(k):
                current_node = current_node.left
            else:
                current_node = current_node.right
            depth += 1
        return None

    def search(self, point) -> bool:
        coords = self._as_coordinates(point)
        self._check_dimensions(coords)
        return self._find_node(coords) is not None

    def get_point(self, point) -> Point | None:
        """
        Returns a copy of the stored point that has the coordinates of
        @param point, together with its value, or None if there is no
        such point. A stored point whose value is the empty string is
        still returned.
        """
        coords = self._as_coordinates(point)
        self._check_dimensions(coords)
        node = self._find_node(coords)
        return node.point.copy() if node is not None else None

    def __contains__(self, point) -> bool:
        return self.search(point)


    def _find_min_node(self,
            node: Node_Kdtree | None,
            dimension: int,
            depth: int
        ) -> Node_Kdtree | None:
        if node is None:
            return None

        if self._discriminator(depth) == dimension:
            # everything smaller on this dimension lives in the left subtree
            if node.left is None:
                return node
            return self._find_min_node(node.left, dimension, depth + 1)

        # the discriminator tells nothing about the ranking dimension,
        # so both subtrees have to be searched
        min_node = node
        for child in (node.left, node.right):
            candidate = self._find_min_node(child, dimension, depth + 1)
            if candidate is not None and \
                    candidate.coordinate(dimension) < min_node.coordinate(dimension):
                min_node = candidate
        return min_node

    def find_min(self, dimension: int) -> Point | None:
        """
        Returns a copy of the point with the smallest coordinate
        on @param dimension, or None if the tree is empty

        :raises CoordinateIndexError: if dimension is not in [0, dimensions)
        """
        if dimension < 0 or dimension >= self.dimensions:
            raise CoordinateIndexError(dimension, self.dimensions)
        min_node = self._find_min_node(self.root, dimension, 0)
        return min_node.point.copy() if min_node is not None else None


    def _remove_point_recurse(self,
            node: Node_Kdtree | None,
            coords,
            depth: int,
            target_node: Node_Kdtree | None = None
        ) -> tuple:
        # returns the root of the subtree after deletion and
        # whether a node was removed from it
        if node is None:
            return (None, False)

        k = self._discriminator(depth)

        # a successor is removed by identity, every other
        # point by coordinates
        if target_node is None:
            matched = points_are_equal(coords, node.point.coordinates)
        else:
            matched = node is target_node

        if matched:
            if node.right is not None:
                successor = self._find_min_node(node.right, k, depth + 1)
                node.point = successor.point
                node.right, _ = self._remove_point_recurse(
                    node.right,
                    successor.point.coordinates,
                    depth + 1,
                    target_node=successor
                )
            elif node.left is not None:
                # the left subtree moves to the right, under a point
                # that is the smallest of the subtree on dimension k
                successor = self._find_min_node(node.left, k, depth + 1)
                node.point = successor.point
                node.right, _ = self._remove_point_recurse(
                    node.left,
                    successor.point.coordinates,
                    depth + 1,
                    target_node=successor
                )
                node.left = None
            else:
                return (None, True)
            return (node, True)

        if coords[k] < node.coordinate(k):
            node.left, removed = self._remove_point_recurse(
                node.left, coords, depth + 1, target_node
            )
        else:
            node.right, removed = self._remove_point_recurse(
                node.right, coords, depth + 1, target_node
            )
        return (node, removed)

    def remove(self, point) -> bool:
        """
        Deletes from the tree the point with the coordinates of @param point

        The value of @param point is irrelevant, only its coordinates are
        used to find the stored point. A matched node that has a right
        subtree takes over the point with the minimum coordinate on its
        discriminator from that subtree, which is then removed from there
        recursively. A matched node with only a left subtree does the same
        with its left subtree, which afterwards becomes its right subtree.
        A leaf is simply dropped.

        :param point: the point to delete, or its coordinates
        :type point: Point | sequence of float

        :return: True if a point was found and removed
        :rtype: bool

        :raises DimensionMismatchError: if the point does not have
                                        the dimensions of the tree
        """
        coords = self._as_coordinates(point)
        self._check_dimensions(coords)

        self.root, removed = self._remove_point_recurse(self.root, coords, 0)
        if removed:
            self.num_of_nodes -= 1
            logger.debug('removed point %s, %d points left', coords, self.num_of_nodes)
        return removed


    def update(self, old_point: Point, new_point: Point) -> bool:
        """
        Moves the point stored at the coordinates of @param old_point
        to @param new_point. If both have the same coordinates only the
        stored value changes.

        :return: False if there is no point at the old coordinates
        """
        self._check_dimensions(old_point)
        self._check_dimensions(new_point)

        if old_point == new_point:
            node = self._find_node(old_point.coordinates)
            if node is None:
                return False
            node.point.set_value(new_point.get_value())
            return True

        if self.remove(old_point):
            self.insert(new_point)
            return True
        return False


    # method checks if the box between @param lower and @param upper
    # contains @param coords, bounds are inclusive on every dimension
    def _box_contains_point(self, coords, lower, upper) -> bool:
        for i_dim in range(self.dimensions):
            if coords[i_dim] < lower[i_dim] or coords[i_dim] > upper[i_dim]:
                return False
        return True

    def range_query(self, lower, upper) -> list[Point]:
        """
        This function performs a Range Query in the tree
        given an axis aligned box

        Parameters:
        lower: the lower corner of the box, one coordinate per dimension
        upper: the upper corner of the box, one coordinate per dimension

        Returns:
        list: copies of the points inside the box, bounds included, in no
              particular order. If lower[i] > upper[i] for some i the
              result is empty.
        """
        lower = self._as_coordinates(lower)
        upper = self._as_coordinates(upper)
        self._check_dimensions(lower, what='Range')
        self._check_dimensions(upper, what='Range')

        # this will contain all points found in range
        result = []

        # nodes left to check along with their depth
        nodes_to_check = [(self.root, 0)] if self.root is not None else []

        while nodes_to_check: # ...is not empty

            current_node, depth = nodes_to_check.pop()
            coords = current_node.point.coordinates

            if self._box_contains_point(coords, lower, upper):
                result.append(current_node.point.copy())

            k = self._discriminator(depth)

            # a side is skipped only when the whole box lies
            # on the other side of the splitting coordinate
            if current_node.right is not None and upper[k] >= coords[k]:
                nodes_to_check.append((current_node.right, depth + 1))
            if current_node.left is not None and lower[k] <= coords[k]:
                nodes_to_check.append((current_node.left, depth + 1))

        return result


    def _nearest_neighbor_recurse(self, node, target, depth, best: list):
        # best holds [closest node so far, its distance to target]
        if node is None:
            return

        dist = node.point.distance_to(target)
        if dist < best[1]:
            best[0] = node
            best[1] = dist

        k = self._discriminator(depth)
        diff = target[k] - node.coordinate(k)

        near, far = (node.left, node.right) if diff < 0 else (node.right, node.left)

        self._nearest_neighbor_recurse(near, target, depth + 1, best)

        # the far side can only hold a closer point if the
        # splitting hyperplane is closer than the best so far
        if abs(diff) < best[1]:
            self._nearest_neighbor_recurse(far, target, depth + 1, best)

    def nearest_neighbor(self, target) -> Point:
        """
        Returns a copy of the point closest to @param target

        :raises DimensionMismatchError: if target does not have
                                        the dimensions of the tree
        :raises EmptyTreeError: if the tree holds no points
        """
        target = self._as_coordinates(target)
        self._check_dimensions(target, what='Target')

        if self.root is None:
            raise EmptyTreeError('Tree is empty')

        best = [self.root, self.root.point.distance_to(target)]
        self._nearest_neighbor_recurse(self.root, target, 0, best)
        return best[0].point.copy()


    def _knn_recurse(self, node, target, depth, k, max_heap, counter):
        if node is None:
            return

        dist = node.point.distance_to(target)

        # The negative is saved in max_heap because python only supports
        # min heap, the counter breaks ties between equal distances
        if len(max_heap) < k:
            heapq.heappush(max_heap, (-dist, next(counter), node.point))
        elif dist < -max_heap[0][0]:
            heapq.heapreplace(max_heap, (-dist, next(counter), node.point))

        dim = self._discriminator(depth)
        diff = target[dim] - node.coordinate(dim)

        near, far = (node.left, node.right) if diff < 0 else (node.right, node.left)

        self._knn_recurse(near, target, depth + 1, k, max_heap, counter)

        if len(max_heap) < k or abs(diff) < -max_heap[0][0]:
            self._knn_recurse(far, target, depth + 1, k, max_heap, counter)

    def knn_query(self, target, k: int) -> list[Point]:
        """
        Executes a k-nearest neighbors (k-NN) query on the tree.

        A max-heap holds the k best candidates found so far, using the
        negative of the distance as the key, so the worst of them is always
        at the top. The far side of a node is visited while fewer than k
        candidates are known or while the splitting hyperplane is closer
        than the worst candidate.

        :param target: The coordinates of the query point.
        :type target: Point | sequence of float
        :param k: The number of nearest neighbors to find.
        :type k: int

        :return: copies of the k nearest points in ascending distance order,
                 all points if k >= size and an empty list if k <= 0
        :rtype: list[Point]

        :raises DimensionMismatchError: if target does not have
                                        the dimensions of the tree

        :example:

        >>> nearest_neighbors = tree.knn_query([2.5, 4.3], 5)
        """
        target = self._as_coordinates(target)
        self._check_dimensions(target, what='Target')

        if k <= 0 or self.root is None:
            return []

        max_heap: list = []
        self._knn_recurse(self.root, target, 0, k, max_heap, itertools.count())

        max_heap.sort(key=lambda entry: (-entry[0], entry[1]))
        return [entry[2].copy() for entry in max_heap]

    k_nearest_neighbors = knn_query


    def _bulk_loading_recurse(self, points, coords, indices, depth):
        if indices.size == 0:
            return None

        k = self._discriminator(depth)
        values = coords[indices, k]
        mid = indices.size // 2

        # linear time selection of the median, no full sort
        median = np.partition(values, mid)[mid]

        smaller = indices[values < median]
        equal = indices[values == median]
        greater = indices[values > median]

        # the first point equal to the median becomes the node and the
        # rest of the equal ones go right, as ties always do
        node = Node_Kdtree(points[equal[0]].copy())
        node.left = self._bulk_loading_recurse(points, coords, smaller, depth + 1)
        node.right = self._bulk_loading_recurse(
            points, coords, np.concatenate((equal[1:], greater)), depth + 1
        )
        return node

    def bulk_loading(self, points):
        """
        Replaces the content of the tree with a balanced tree built
        from @param points

        At each depth the points of the current range are partitioned
        around the median of the discriminator, the median becomes the
        node and the two halves are built recursively. The tree is
        balanced only right after the build, later insertions and
        deletions do not keep it balanced. This is the preferred way
        to build a tree when all the points are known upfront, as
        sorted insertion orders give a tree as deep as its size.

        :raises DimensionMismatchError: if any point does not have
                                        the dimensions of the tree,
                                        the tree is left unchanged
        """
        points = list(points)
        for point in points:
            self._check_dimensions(point)

        if not points:
            self.root = None
            self.num_of_nodes = 0
            return

        coords = np.array([point.coordinates for point in points], dtype=float)
        self.root = self._bulk_loading_recurse(
            points, coords, np.arange(len(points)), 0
        )
        self.num_of_nodes = len(points)
        logger.debug('bulk loaded %d points', self.num_of_nodes)


    def size(self) -> int:
        return self.num_of_nodes

    def __len__(self) -> int:
        return self.num_of_nodes

    def is_empty(self) -> bool:
        return self.root is None

    def get_dimensions(self) -> int:
        return self.dimensions

    def clear(self):
        self.root = None
        self.num_of_nodes = 0
        logger.debug('tree cleared')

    def height(self) -> int:
        max_depth = 0
        nodes_to_check = [(self.root, 1)] if self.root is not None else []
        while nodes_to_check:
            node, depth = nodes_to_check.pop()
            max_depth = max(max_depth, depth)
            for child in (node.left, node.right):
                if child is not None:
                    nodes_to_check.append((child, depth + 1))
        return max_depth

    def in_order(self):
        # left, self, right with an explicit stack
        stack = []
        node = self.root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.point.copy()
            node = node.right

    def __iter__(self):
        return self.in_order()

    def print_tree(self, file=None):
        for point in self.in_order():
            print(point, file=file)
