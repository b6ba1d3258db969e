"""
Tests for TilingConfig validation and YAML loading.
"""

import pytest

from hextile.config import TilingConfig
from hextile.errors import ConfigError
from hextile.projection import EquirectangularProjection


class TestTilingConfig:
    """Construction and validation."""

    def test_defaults(self):
        """Test default options."""
        config = TilingConfig()
        assert config.shape == "square"
        assert config.tilt == 0.0
        assert config.width == 1000.0
        assert config.center is None
        assert config.workers == 1

    def test_shape_is_case_insensitive(self):
        assert TilingConfig(shape="HEXAGON").shape == "hexagon"

    def test_unknown_shape(self):
        with pytest.raises(ConfigError, match="Unknown shape"):
            TilingConfig(shape="triangle")

    def test_width_clamped(self):
        """Test widths are clamped, not rejected."""
        assert TilingConfig(width=10).width == 500.0
        assert TilingConfig(width=9e9).width == 500000.0

    def test_center_normalised(self):
        assert TilingConfig(center=[4, 52]).center == (4.0, 52.0)

    def test_bad_center(self):
        """Test malformed centres are rejected."""
        with pytest.raises(ConfigError):
            TilingConfig(center=(1, 2, 3))
        with pytest.raises(ConfigError):
            TilingConfig(center=(float("nan"), 0))

    def test_non_finite_tilt(self):
        with pytest.raises(ConfigError):
            TilingConfig(tilt=float("inf"))

    def test_workers(self):
        with pytest.raises(ConfigError):
            TilingConfig(workers=0)

    def test_projection_must_have_inverse(self):
        """Test projection overrides are validated."""
        with pytest.raises(ConfigError):
            TilingConfig(projection=object())
        projection = EquirectangularProjection((0, 0))
        assert TilingConfig(projection=projection).projection is projection


class TestFromDict:
    """Plain-dict construction."""

    def test_unknown_keys_rejected(self):
        """Test unknown option names are rejected."""
        with pytest.raises(ConfigError, match="Unknown tiling options"):
            TilingConfig.from_dict({"shape": "square", "radius": 3})

    def test_none_values_use_defaults(self):
        """Test None values fall back to defaults."""
        config = TilingConfig.from_dict({"shape": None, "width": None, "tilt": 10})
        assert config.shape == "square"
        assert config.width == 1000.0
        assert config.tilt == 10.0

    def test_roundtrip_through_to_dict(self):
        config = TilingConfig(shape="hexagon", width=2500, tilt=15, center=(4.9, 52.37))
        assert TilingConfig.from_dict(config.to_dict()) == config


class TestFromYaml:
    """YAML files."""

    def test_load(self, tmp_path):
        """Test options load from YAML."""
        path = tmp_path / "tiling.yaml"
        path.write_text("shape: hexagon\nwidth: 2500\ntilt: 15\ncenter: [4.9, 52.37]\n")
        config = TilingConfig.from_yaml(path)
        assert config.shape == "hexagon"
        assert config.width == 2500.0
        assert config.center == (4.9, 52.37)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert TilingConfig.from_yaml(path) == TilingConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TilingConfig.from_yaml(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- square\n- hexagon\n")
        with pytest.raises(ConfigError, match="mapping"):
            TilingConfig.from_yaml(path)

    def test_invalid_yaml(self, tmp_path):
        """Test unparsable YAML is a config error."""
        path = tmp_path / "bad.yaml"
        path.write_text("shape: [square\n")
        with pytest.raises(ConfigError, match="Could not parse"):
            TilingConfig.from_yaml(path)

    def test_projection_not_allowed(self, tmp_path):
        """Test YAML cannot set a projection."""
        path = tmp_path / "projection.yaml"
        path.write_text("projection: aeqd\n")
        with pytest.raises(ConfigError):
            TilingConfig.from_yaml(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
