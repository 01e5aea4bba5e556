import pytest

from kd_tree import Kdtree
import osm_reader


OSM_XML = """<?xml version='1.0' encoding='UTF-8'?>
<osm version="0.6" generator="test">
  <node id="1" version="1" lat="35.1000000" lon="33.3000000">
    <tag k="name" v="first"/>
  </node>
  <node id="2" version="1" lat="35.2000000" lon="33.4000000"/>
  <node id="3" version="1" lat="35.9000000" lon="33.9000000">
    <tag k="name" v="third"/>
  </node>
</osm>
"""


@pytest.fixture
def osm_file(tmp_path):
    path = tmp_path / 'map.osm'
    path.write_text(OSM_XML)
    return path


def test_points_from_osm(osm_file):
    points = osm_reader.points_from_osm(osm_file)
    assert [p.value for p in points] == ['first', '2', 'third']
    assert points[0].coordinates == pytest.approx((35.1, 33.3))
    assert points[1].dimensions == 2


def test_handler_data_array(osm_file):
    handler = osm_reader.GetNamesAndLocs()
    handler.apply_file(str(osm_file))
    data = handler.get_data()
    assert data.shape == (3, 2)
    assert handler.get_names() == ['first', '2', 'third']


def test_osm_points_bulk_loaded(osm_file):
    tree = Kdtree(2, osm_reader.points_from_osm(osm_file))
    assert tree.size() == 3
    assert tree.nearest_neighbor([35.15, 33.32]).value == 'first'
    found = tree.range_query([35.0, 33.0], [35.5, 33.5])
    assert sorted(p.value for p in found) == ['2', 'first']
