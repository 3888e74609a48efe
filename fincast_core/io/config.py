from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from fincast_core.domain.models import EngineConfig


def load_engine_config(path: str | Path) -> EngineConfig:
    data = _read_json(path)
    return EngineConfig(
        projection_months=int(data.get("projection_months", 6)),
        break_even_horizon=int(data.get("break_even_horizon", 12)),
        store_path=data.get("store_path"),
        user_id=data.get("user_id"),
    )


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
