from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.is_file():
    load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass
class MolgraphSettings:
    """Configuration loaded from MOLGRAPH_* environment variables.

      MOLGRAPH_LOG_LEVEL=INFO
      MOLGRAPH_LAYOUT_ITERATIONS=200
      MOLGRAPH_LAYOUT_WIDTH=800
      MOLGRAPH_LAYOUT_HEIGHT=600
      MOLGRAPH_CENTER_STRUCTURES=false
      MOLGRAPH_BACKBONE_BONDS=false
    """

    log_level: str = "INFO"

    # Spring embedder
    layout_iterations: int = 200
    layout_width: int = 800
    layout_height: int = 600

    # PDB parsing
    center_structures: bool = False
    backbone_bonds: bool = False


def load_settings() -> MolgraphSettings:
    """Load settings from environment variables."""
    return MolgraphSettings(
        log_level=os.environ.get("MOLGRAPH_LOG_LEVEL", "INFO").upper(),
        layout_iterations=int(os.environ.get("MOLGRAPH_LAYOUT_ITERATIONS", "200")),
        layout_width=int(os.environ.get("MOLGRAPH_LAYOUT_WIDTH", "800")),
        layout_height=int(os.environ.get("MOLGRAPH_LAYOUT_HEIGHT", "600")),
        center_structures=_env_bool("MOLGRAPH_CENTER_STRUCTURES"),
        backbone_bonds=_env_bool("MOLGRAPH_BACKBONE_BONDS"),
    )
