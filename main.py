import sys
import time

from kd_tree import Kdtree
import osm_reader
import serial_search


point_dim = 2

# number of neighbours asked in the sample knn query
knn_k = 10

# half side, in degrees, of the sample range query box
range_half_side = 0.01


if __name__ == '__main__':

    if len(sys.argv) != 2:
        sys.exit(f'usage: {sys.argv[0]} <osm file>')

    # full path to osm file (.osm or .osm.pbf)
    osm_path = sys.argv[1]

    start = time.time()
    points = osm_reader.points_from_osm(osm_path)
    end = time.time()
    print(f"Elapsed time for reading {len(points)} nodes: {end-start:.6f} seconds")

    if not points:
        sys.exit('no located nodes in ' + osm_path)

    start = time.time()
    catalog = Kdtree(point_dim, points)
    end = time.time()
    print(f"Elapsed time for bulking: {end-start:.6f} seconds, height {catalog.height()}")

    # Inserting elements one by one for comparison with bulk loading
    one_by_one = Kdtree(point_dim)
    start = time.time()
    for point in points:
        one_by_one.insert(point)
    end = time.time()
    print(f"Elapsed time for {len(points)} insertions: {end-start:.6f} seconds, height {one_by_one.height()}")

    target = points[len(points) // 2].coordinates
    lower = [c - range_half_side for c in target]
    upper = [c + range_half_side for c in target]

    start = time.time()
    in_range = catalog.range_query(lower, upper)
    end = time.time()
    print(f"Elapsed time for range query ({len(in_range)} points): {end-start:.6f} seconds")

    start = time.time()
    serial_in_range = serial_search.serial_range_query(points, lower, upper)
    end = time.time()
    print(f"Elapsed time for serial range query ({len(serial_in_range)} points): {end-start:.6f} seconds")

    start = time.time()
    neighbours = catalog.knn_query(target, knn_k)
    end = time.time()
    print(f"Elapsed time for {knn_k}-nn query: {end-start:.6f} seconds")

    start = time.time()
    serial_neighbours = serial_search.serial_knn_query(points, target, knn_k)
    end = time.time()
    print(f"Elapsed time for serial {knn_k}-nn query: {end-start:.6f} seconds")

    matching = len(in_range) == len(serial_in_range) and all(
        abs(a.distance_to(target) - b.distance_to(target)) < 1e-9
        for a, b in zip(neighbours, serial_neighbours)
    )
    print(f"Results match serial search: {matching}")

    start = time.time()
    removed = 0
    for point in points[:len(points) // 10]:
        removed += catalog.remove(point)
    end = time.time()
    print(f"Elapsed time for {removed} deletions: {end-start:.6f} seconds")
