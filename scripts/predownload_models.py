#!/usr/bin/env python3
"""
Pre-download the AI fallback model with progress output.

The model id defaults to fallback.ai.model_id from the given config file, so the
gateway does not block on a multi-GB download the first time no rule matches.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List


def _download_repo_files(repo_id: str, revision: str | None) -> None:
    try:
        from huggingface_hub import HfApi, hf_hub_download  # type: ignore
    except Exception as exc:
        print("Missing dependency: huggingface_hub. Install the 'llm' extra first.", file=sys.stderr)
        raise SystemExit(1) from exc

    api = HfApi()
    files: List[str] = api.list_repo_files(repo_id=repo_id, revision=revision, repo_type="model")
    if not files:
        print(f"No files found for {repo_id}", file=sys.stderr)
        return

    total = len(files)
    print(f"Downloading model files for {repo_id} ({total} files)")
    for idx, filename in enumerate(files, start=1):
        print(f"[{idx}/{total}] {filename}")
        hf_hub_download(repo_id=repo_id, filename=filename, revision=revision, repo_type="model")
    print("Done.")


def _model_from_config(path: str) -> str:
    config_path = Path(path)
    if not config_path.exists() or config_path.suffix.lower() != ".json":
        return ""
    with config_path.open("r", encoding="utf-8") as f:
        cfg = json.load(f)
    return cfg.get("fallback", {}).get("ai", {}).get("model_id", "")


def main() -> None:
    parser = argparse.ArgumentParser(description="Pre-download the AI fallback model with progress")
    parser.add_argument("--config", default=os.environ.get("TRIAGE_CONFIG", "config/pipeline.json"), help="Config file")
    parser.add_argument("--llm-model", default=None, help="LLM model repo id (overrides config)")
    parser.add_argument("--revision", default=None, help="Model revision (optional)")
    args = parser.parse_args()

    model_id = args.llm_model or _model_from_config(args.config) or "Qwen/Qwen2.5-1.5B-Instruct"
    _download_repo_files(model_id, args.revision)


if __name__ == "__main__":
    main()
