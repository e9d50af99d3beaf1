import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

NO_MATCH_REPLY = "I'm not fully confident about this request. A human agent will assist you shortly."

DEFAULT_CONFIG: Dict[str, Any] = {
    "knowledge": {"source": "data/knowledge.json"},
    "fallback": {
        "reply": NO_MATCH_REPLY,
        "ai": {
            "enabled": False,
            "model_id": "Qwen/Qwen2.5-1.5B-Instruct",
            "quantization": "int4",
            "max_new_tokens": 256,
            "temperature": 0.2,
            "timeout_sec": 8.0,
        },
    },
    "escalation": {"sink": "log", "path": "data/escalations.jsonl"},
    "server": {"cors_origins": ["*"]},
}


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON or YAML config file holding a top-level mapping of sections."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in {".json", ".yml", ".yaml"}:
        raise ValueError(f"Unsupported config format: {config_path.suffix}")

    with config_path.open("r", encoding="utf-8") as f:
        data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping of sections: {config_path}")
    return data


def merge_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Overlay ``overrides`` on a fresh copy of DEFAULT_CONFIG, section by section."""
    merged = copy.deepcopy(DEFAULT_CONFIG)
    _deep_update(merged, overrides or {})
    return merged


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
