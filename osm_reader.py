import logging

import numpy as np
import osmium

from point_management import Point

logger = logging.getLogger(__name__)


class GetNamesAndLocs(osmium.SimpleHandler):

    def __init__(self):
        super().__init__()
        self.records = []  # Collect records in a list

    # It automatically runs a loop and fetches a node from
    # the osm file in "n" variable
    def node(self, n):
        # nodes without a valid location cannot be indexed
        if not n.location.valid():
            return
        # Append a tuple (id, lat, lon, name) to the list, nodes
        # without a name tag are labelled with their osm id
        self.records.append(
            (n.id, n.location.lat, n.location.lon, n.tags.get('name', str(n.id)))
        )

    def get_data(self) -> np.ndarray:
        # Convert the coordinates of the records to a NumPy array at the end
        if not self.records:
            return np.empty((0, 2), dtype=float)
        return np.array([(r[1], r[2]) for r in self.records], dtype=float)

    def get_names(self) -> list[str]:
        return [r[3] for r in self.records]

    def get_points(self) -> list[Point]:
        return [Point(coords, name) for coords, name in zip(self.get_data(), self.get_names())]


def points_from_osm(osm_path) -> list[Point]:
    """
    Reads every located node of an osm file (.osm or .osm.pbf) and
    returns it as a 2 dimensional Point([lat, lon], name)
    """
    handler = GetNamesAndLocs()
    handler.apply_file(str(osm_path))
    logger.debug('read %d nodes from %s', len(handler.records), osm_path)
    return handler.get_points()
