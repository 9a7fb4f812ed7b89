from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from core.schema import DealParameters

from .normalize import normalize_deal_input


def load_deal_json(path: Union[str, Path]) -> DealParameters:
    """
    Load a deal from JSON: either the bare parameters object or a saved
    property record whose parameters sit under ``content``.
    """
    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(payload).__name__}.")
    if isinstance(payload.get("content"), dict):
        payload = payload["content"]
    return normalize_deal_input(payload)
