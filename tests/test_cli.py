"""
Tests for the ``hextile`` command line.
"""

import argparse
import json

import pytest

from hextile.cli import build_config, build_parser, main, parse_lnglat

SMALL_SQUARE = {
    "type": "FeatureCollection",
    "features": [{
        "type": "Feature",
        "properties": {},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[0, 0], [0, 0.01], [0.01, 0.01], [0.01, 0], [0, 0]]],
        },
    }],
}


@pytest.fixture
def infile(tmp_path):
    path = tmp_path / "input.geojson"
    path.write_text(json.dumps(SMALL_SQUARE))
    return path


class TestArguments:
    """Argument parsing."""

    def test_parse_lnglat(self):
        """Test longitude,latitude parsing."""
        assert parse_lnglat("4.9,52.37") == (4.9, 52.37)
        assert parse_lnglat("-73.5,40") == (-73.5, 40.0)

    @pytest.mark.parametrize("value", ["4.9", "a,b", "1,2,3", ""])
    def test_parse_lnglat_rejects(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_lnglat(value)

    def test_bad_center_exits(self, infile, tmp_path):
        """Test a malformed centre is an argparse error."""
        with pytest.raises(SystemExit) as exc:
            main([str(infile), str(tmp_path / "out.json"), "--center", "nowhere"])
        assert exc.value.code == 2

    def test_bad_shape_exits(self, infile, tmp_path):
        with pytest.raises(SystemExit):
            main([str(infile), str(tmp_path / "out.json"), "-s", "triangle"])

    def test_shape_case_insensitive(self):
        args = build_parser().parse_args(["in", "out", "-s", "HEXAGON"])
        assert args.shape == "hexagon"

    def test_cli_overrides_yaml(self, tmp_path):
        """Test command line flags override the YAML config."""
        config = tmp_path / "tiling.yaml"
        config.write_text("shape: hexagon\nwidth: 2500\n")
        args = build_parser().parse_args(["in", "out", "--config", str(config), "-w", "800"])
        built = build_config(args)
        assert built.shape == "hexagon"
        assert built.width == 800.0


class TestMain:
    """Full command runs."""

    def test_writes_features(self, infile, tmp_path):
        """Test the default run writes feature records."""
        outfile = tmp_path / "out" / "cells.json"
        assert main([str(infile), str(outfile)]) == 0
        cells = json.loads(outfile.read_text())
        assert {tuple(c["address"]) for c in cells} == {(-1, -1), (-1, 0), (0, -1), (0, 0)}
        assert set(cells[0]) == {"id", "address", "center", "ring"}

    def test_tab_indented(self, infile, tmp_path):
        outfile = tmp_path / "cells.json"
        main([str(infile), str(outfile)])
        assert "\n\t" in outfile.read_text()

    def test_geojson_format(self, infile, tmp_path):
        """Test FeatureCollection output."""
        outfile = tmp_path / "cells.geojson"
        assert main([str(infile), str(outfile), "-s", "hexagon", "-t", "30",
                     "--format", "geojson"]) == 0
        collection = json.loads(outfile.read_text())
        assert collection["type"] == "FeatureCollection"
        assert all(f["properties"]["shape"] == "hexagon" for f in collection["features"])

    def test_bbox_file(self, tmp_path):
        """Test a bbox file as input."""
        infile = tmp_path / "bbox.json"
        infile.write_text("[0, 0, 0.01, 0.01]")
        outfile = tmp_path / "cells.json"
        assert main([str(infile), str(outfile), "--center", "0.005,0.005"]) == 0
        assert len(json.loads(outfile.read_text())) == 4

    def test_invalid_json(self, tmp_path):
        """Test unreadable input exits with 1."""
        infile = tmp_path / "broken.json"
        infile.write_text("{not json")
        assert main([str(infile), str(tmp_path / "out.json")]) == 1

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "nope.json"), str(tmp_path / "out.json")]) == 1

    def test_malformed_polygon(self, tmp_path):
        """Test invalid geometry exits with 1 and writes nothing."""
        infile = tmp_path / "open.json"
        infile.write_text(json.dumps({"type": "Polygon", "coordinates": [[[0, 0], [0, 1], [1, 1]]]}))
        outfile = tmp_path / "out.json"
        assert main([str(infile), str(outfile)]) == 1
        assert not outfile.exists()

    def test_missing_config(self, infile, tmp_path):
        assert main([str(infile), str(tmp_path / "out.json"),
                     "--config", str(tmp_path / "missing.yaml")]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
