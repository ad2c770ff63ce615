"""Tests for chart configuration loading."""

import json

import pytest

from barplanner.config import (
    DEFAULT_CHART_CONFIG,
    cell_width_for,
    load_config,
    save_default_config,
)
from barplanner.models import Scale


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test that a missing file returns a copy of the defaults."""
        config = load_config(str(tmp_path / "none.json"))
        assert config == DEFAULT_CHART_CONFIG

        config["export"]["paper_size"] = "A3"
        assert DEFAULT_CHART_CONFIG["export"]["paper_size"] == "A4"

    def test_partial_sections_merge(self, tmp_path):
        """Test that nested sections merge key by key."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"export": {"paper_size": "B4"}, "cell_widths": {"day": 40}}))

        config = load_config(str(path))
        assert config["export"]["paper_size"] == "B4"
        assert config["export"]["orientation"] == "landscape"
        assert cell_width_for(config, Scale.DAY) == 40
        assert cell_width_for(config, Scale.HOUR) == 24

    def test_invalid_paper_size(self, tmp_path):
        """Test that unknown paper sizes are rejected."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"export": {"paper_size": "Letter"}}))
        with pytest.raises(ValueError, match="paper size"):
            load_config(str(path))

    def test_invalid_orientation(self, tmp_path):
        """Test that unknown orientations are rejected."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"export": {"orientation": "sideways"}}))
        with pytest.raises(ValueError, match="orientation"):
            load_config(str(path))

    def test_save_default_round_trip(self, tmp_path):
        """Test that the saved default file loads back as the defaults."""
        path = str(tmp_path / "config.json")
        save_default_config(path)
        assert load_config(path) == DEFAULT_CHART_CONFIG
