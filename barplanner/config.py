"""Chart and export configuration."""

import copy
import json
from pathlib import Path

from barplanner.models import Scale


DEFAULT_CONFIG_FILE = "barplanner_config.json"

PAPER_SIZES = ("A4", "A3", "B4")
ORIENTATIONS = ("portrait", "landscape")

DEFAULT_CHART_CONFIG = {
    "store_path": "barchart.json",
    "cell_widths": {
        Scale.HOUR.value: 24,
        Scale.DAY.value: 32,
        Scale.WEEK.value: 20,
        Scale.MONTH.value: 14,
    },
    "export": {
        "paper_size": "A4",
        "orientation": "landscape",
        "show_header": True,
        "show_legend": True,
    },
}


def load_config(config_path: str = DEFAULT_CONFIG_FILE) -> dict:
    """Load chart configuration from a JSON file.

    If the file doesn't exist, returns the default configuration. Nested
    sections are merged key by key so partial files are accepted.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary with chart configuration

    Raises:
        ValueError: If the export section names an unknown paper size or
            orientation
    """
    result = copy.deepcopy(DEFAULT_CHART_CONFIG)

    path = Path(config_path)
    if not path.exists():
        return result

    with open(path) as f:
        config = json.load(f)

    for key, value in config.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key].update(value)
        else:
            result[key] = value

    export = result["export"]
    if export["paper_size"] not in PAPER_SIZES:
        raise ValueError(
            f"Unknown paper size: {export['paper_size']}. Use one of {', '.join(PAPER_SIZES)}."
        )
    if export["orientation"] not in ORIENTATIONS:
        raise ValueError(
            f"Unknown orientation: {export['orientation']}. Use 'portrait' or 'landscape'."
        )

    return result


def save_default_config(config_path: str = DEFAULT_CONFIG_FILE) -> None:
    """Save the default configuration to a file."""
    with open(config_path, "w") as f:
        json.dump(DEFAULT_CHART_CONFIG, f, indent=2)


def cell_width_for(config: dict, scale: Scale) -> int:
    """Configured cell width for a scale."""
    return int(config["cell_widths"][scale.value])
