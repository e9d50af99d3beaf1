"""Local REPL for the support triage pipeline."""

import argparse
import asyncio
import json
from dataclasses import asdict
from pathlib import Path

from triage import ChatPipeline, load_knowledge_base, normalize
from triage.config import load_config, merge_config
from triage.llm import build_fallback_responder


async def _repl(pipeline: ChatPipeline) -> None:
    print("Support triage ready. Type 'exit' to quit.")
    while True:
        user_input = input("you> ").strip()
        if not user_input or user_input.lower() in {"exit", "quit"}:
            break
        try:
            candidate = await pipeline.respond(user_input)
        except Exception as exc:
            print(f"(pipeline error: {exc})")
            candidate = None
        response = normalize(candidate)
        print(f"bot> {json.dumps(asdict(response), ensure_ascii=False)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the support triage pipeline locally.")
    parser.add_argument("--config", default=None, help="Path to config file (json/yaml).")
    parser.add_argument("--knowledge", default=None, help="Path to knowledge base file.")
    args = parser.parse_args()

    config = merge_config(load_config(args.config) if args.config else None)
    kb_path = args.knowledge or config.get("knowledge", {}).get("source", "")
    if not Path(kb_path).exists():
        print(f"Knowledge base not found: {kb_path}")
        print("Every message will fall through to the escalation fallback.")

    kb = load_knowledge_base(kb_path)
    pipeline = ChatPipeline(config, kb, responder=build_fallback_responder(config))
    asyncio.run(_repl(pipeline))


if __name__ == "__main__":
    main()
