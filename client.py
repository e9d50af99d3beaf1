#!/usr/bin/env python3
"""
Interactive HTTP client for the support triage gateway.

Sends each line to POST /chat and prints the JSON body together with the
X-Request-ID header, so replies can be matched against server logs.

Examples:
  python client.py --url http://127.0.0.1:5000/chat --query "I forgot my password"
  python client.py --url http://127.0.0.1:5000/chat            # interactive
"""

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request
from typing import Any, Dict, List, Optional, Tuple


def _build_headers(args: argparse.Namespace) -> List[tuple[str, str]]:
    headers: List[tuple[str, str]] = []
    if args.auth:
        headers.append(("Authorization", args.auth))
    return headers


def _post_chat(url: str, message: str, headers: List[tuple[str, str]]) -> Tuple[int, Optional[str], Dict[str, Any]]:
    data = json.dumps({"message": message}).encode("utf-8")
    req = urllib.request.Request(url, data=data, method="POST")
    req.add_header("Content-Type", "application/json")
    for key, value in headers:
        req.add_header(key, value)
    try:
        with urllib.request.urlopen(req) as resp:
            return resp.status, resp.headers.get("X-Request-ID"), json.loads(resp.read() or b"{}")
    except urllib.error.HTTPError as e:
        try:
            body = json.loads(e.read() or b"{}")
        except ValueError:
            body = {}
        return e.code, e.headers.get("X-Request-ID"), body


def _print_reply(status: int, request_id: Optional[str], body: Dict[str, Any]) -> None:
    print(f"bot [{status} {request_id or '-'}]> {json.dumps(body, ensure_ascii=False)}")


def text_client(url: str, query: Optional[str], headers: List[tuple[str, str]]) -> None:
    if query is not None:
        _print_reply(*_post_chat(url, query, headers))
        return
    print("Connected. Type 'exit' to quit.")
    while True:
        try:
            text = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if text.lower() in {"exit", "quit"}:
            break
        try:
            _print_reply(*_post_chat(url, text, headers))
        except urllib.error.URLError as e:
            print(f"HTTP request failed: {e}", file=sys.stderr)


def main() -> None:
    parser = argparse.ArgumentParser(description="Client for the support triage gateway")
    parser.add_argument("--url", default="http://127.0.0.1:5000/chat", help="Chat endpoint URL")
    parser.add_argument("--query", default=None, help="One-shot query. Omit to enter interactive mode.")
    parser.add_argument("--auth", default=None, help="Authorization header if needed, e.g. 'Bearer xxx'")
    args = parser.parse_args()

    text_client(args.url, args.query, _build_headers(args))


if __name__ == "__main__":
    main()
