"""
Tests for cell identifiers and feature export.
"""

import geopandas as gpd
import pytest

from hextile import hextile
from hextile.cells import Cell
from hextile.output import (
    Feature,
    decode_id,
    encode_id,
    to_feature_collection,
    to_geodataframe,
    to_records,
)

RING = ((0.0, 0.0), (1.0, 0.0), (1.0, -1.0), (0.0, -1.0), (0.0, 0.0))


def make_feature(address=(-1, 2), keep=True):
    cell = Cell(address=address, planar_center=(0.5, -0.5), center=(0.5, -0.5),
                ring=RING, keep=keep)
    return Feature.from_cell(cell, "square")


class TestIdentifiers:
    """Stable, filename-safe ids."""

    def test_encode(self):
        """Test minus signs become M and parts join with dots."""
        assert encode_id((-1, -2)) == "M1.M2"
        assert encode_id((3, -14)) == "3.M14"
        assert encode_id((0, 0)) == "0.0"
        assert encode_id((4, -2, -5)) == "4.M2.M5"

    def test_decode(self):
        assert decode_id("M1.M2") == (-1, -2)
        assert decode_id("4.M2.M5") == (4, -2, -5)

    def test_decode_inverts_encode(self):
        """Test decoding restores the address."""
        for address in [(0, 0), (-7, 12), (100, -100)]:
            assert decode_id(encode_id(address)) == address

    def test_decode_garbage(self):
        with pytest.raises(ValueError, match="Not a cell id"):
            decode_id("a.b")

    def test_ids_have_no_minus(self):
        """Test emitted ids never contain a minus sign."""
        features = hextile([0, 0, 0.05, 0.05], shape="hexagon")
        assert all("-" not in f.id for f in features)


class TestFeature:
    """Feature records and GeoJSON."""

    def test_to_dict(self):
        """Test the plain record layout."""
        record = make_feature().to_dict()
        assert record == {
            "id": "M1.2",
            "address": [-1, 2],
            "center": [0.5, -0.5],
            "ring": [list(p) for p in RING],
        }

    def test_properties(self):
        feature = make_feature(keep=False)
        assert feature.properties == {"shape": "square", "address": [-1, 2], "boundary": False}

    def test_equality_ignores_properties(self):
        """Test features compare by geometry only."""
        assert make_feature(keep=True) == make_feature(keep=False)

    def test_to_geojson(self):
        geojson = make_feature().to_geojson()
        assert geojson["type"] == "Feature"
        assert geojson["id"] == "M1.2"
        assert geojson["geometry"]["type"] == "Polygon"
        assert geojson["geometry"]["coordinates"][0][0] == geojson["geometry"]["coordinates"][0][-1]
        assert geojson["properties"]["center"] == [0.5, -0.5]

    def test_records_and_collection(self):
        features = [make_feature((0, 0)), make_feature((0, 1))]
        assert [r["id"] for r in to_records(features)] == ["0.0", "0.1"]
        collection = to_feature_collection(features)
        assert collection["type"] == "FeatureCollection"
        assert len(collection["features"]) == 2


class TestGeoDataFrame:
    """Tabular export."""

    def test_columns_and_index(self):
        """Test GeoDataFrame columns, index and CRS."""
        features = hextile([4.88, 52.36, 4.92, 52.38], width=1000)
        gdf = to_geodataframe(features)
        assert isinstance(gdf, gpd.GeoDataFrame)
        assert gdf.index.name == "cell_id"
        assert len(gdf) == len(features)
        assert list(gdf.columns) == ["address", "center_lon", "center_lat", "boundary", "geometry"]
        assert gdf.crs.to_epsg() == 4326
        assert gdf.geometry.is_valid.all()

    def test_area_matches_width(self):
        """Test cell areas match the requested width."""
        features = hextile([4.88, 52.36, 4.92, 52.38], width=1000)
        gdf = to_geodataframe(features).to_crs(epsg=28992)
        # equirectangular cells are ~1 km squares near the centre
        assert gdf.geometry.area.median() == pytest.approx(1e6, rel=0.05)

    def test_empty(self):
        gdf = to_geodataframe([])
        assert len(gdf) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
