#!/usr/bin/env python3
"""
Smoke test of the concierge chat over Chainlit's socket.io transport.

Run against a started UI (``python -m src.presentation.cli startup``):
  python scripts/smoke_dialog.py

Options:
  --ws-url           WebSocket URL (default: ws://localhost:8000/ws/socket.io/?EIO=4&transport=websocket)
  --timeout          Timeout per answer (seconds)
  --print-answers    Print full answers
  --dialog           Also run the multi-turn dialogue
"""

import argparse
import json
import sys
import time
import uuid
from datetime import datetime, timezone

import websocket


DEFAULT_WS_URL = "ws://localhost:8000/ws/socket.io/?EIO=4&transport=websocket"

CHECKS = [
    {"q": "ping", "expect_all": ["pong"]},
    {"q": "hi", "expect_any": ["projects", "ask me"]},
    {"q": "How can I book a call with you?", "expect_any": ["book", "http"]},
    {
        "q": "What is your leadership style?",
        "expect_any": ["[1]", "sources"],
        "expect_none": ["Something went wrong"],
    },
    {
        "q": "Tell me the story behind your teaching work",
        "expect_none": ["Something went wrong"],
    },
    {
        "q": "What did you do on the zzzqqq-nonexistent project?",
        "expect_any": ["don't have that in my sources"],
    },
]

DIALOGUE = [
    "hello",
    "What projects have you led?",
    "Walk me through the most recent one",
    "What were the outcomes?",
    "thanks",
    "Are you available to hire?",
]


def now_iso():
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


class ChainlitSocket:
    """Minimal socket.io (EIO=4) client speaking Chainlit's message events."""

    def __init__(self, ws_url: str):
        self._ws_url = ws_url
        self._ws = websocket.WebSocket()

    def connect(self, wait: float = 30) -> None:
        deadline = time.time() + wait
        while True:
            try:
                self._ws.connect(self._ws_url)
                break
            except OSError:
                if time.time() >= deadline:
                    raise
                time.sleep(1)

        opened = self._ws.recv()
        if not opened.startswith("0"):
            raise RuntimeError(f"Unexpected open message: {opened}")

        auth = {
            "sessionId": str(uuid.uuid4()),
            "clientType": "webapp",
            "userEnv": "{}",
            "chatProfile": None,
            "threadId": None,
        }
        self._ws.send("40" + json.dumps(auth))
        while True:
            frame = self._ws.recv()
            if frame == "2":
                self._ws.send("3")
            elif frame.startswith("40"):
                break
        self._ws.send('42["connection_successful"]')

    def close(self) -> None:
        self._ws.close()

    def _frame(self, timeout: float) -> str:
        self._ws.settimeout(1)
        deadline = time.time() + timeout
        while time.time() < deadline:
            try:
                frame = self._ws.recv()
            except websocket.WebSocketTimeoutException:
                continue
            if frame == "2":
                # engine.io ping
                self._ws.send("3")
                continue
            return frame
        raise TimeoutError("No frame")

    def event(self, timeout: float = 30) -> tuple[str, object]:
        deadline = time.time() + timeout
        while time.time() < deadline:
            frame = self._frame(timeout=1)
            if not frame.startswith("42"):
                continue
            try:
                data = json.loads(frame[2:])
            except json.JSONDecodeError:
                continue
            if isinstance(data, list) and data:
                return data[0], data[1] if len(data) > 1 else None
        raise TimeoutError("No event received")

    def greeting(self, timeout: float = 30) -> str:
        deadline = time.time() + timeout
        while time.time() < deadline:
            try:
                name, payload = self.event(timeout=5)
            except TimeoutError:
                continue
            if name == "new_message" and _is_assistant(payload):
                return payload.get("output", "")
        return ""

    def send(self, text: str) -> None:
        message = {
            "id": str(uuid.uuid4()),
            "threadId": None,
            "parentId": None,
            "createdAt": now_iso(),
            "output": text,
            "name": "User",
            "type": "user_message",
            "metadata": {},
        }
        payload = {"message": message, "fileReferences": None}
        self._ws.send("42" + json.dumps(["client_message", payload], ensure_ascii=False))

    def answer(self, timeout: float = 240) -> str:
        """Collect one assistant answer from streamed tokens or a full message."""
        response_id = None
        text = ""
        deadline = time.time() + timeout
        while time.time() < deadline:
            try:
                name, payload = self.event(timeout=5)
            except TimeoutError:
                continue
            if not isinstance(payload, dict):
                continue

            if name in ("new_message", "stream_start") and _is_assistant(payload):
                response_id = payload.get("id")
                if name == "new_message" and payload.get("output", "").strip():
                    return payload["output"]
            elif name == "stream_token" and response_id and payload.get("id") == response_id:
                text += payload.get("token", "")
            elif name == "update_message" and response_id and payload.get("id") == response_id:
                return payload.get("output", text)

        raise TimeoutError("No assistant response")


def _is_assistant(payload) -> bool:
    return isinstance(payload, dict) and payload.get("type") == "assistant_message"


def check_expectations(answer: str, check: dict) -> list[str]:
    errors = []
    ans = (answer or "").lower()

    expect_any = check.get("expect_any") or []
    if expect_any and not any(x.lower() in ans for x in expect_any):
        errors.append(f"missing any of: {expect_any}")

    for token in check.get("expect_all") or []:
        if token.lower() not in ans:
            errors.append(f"missing: {token}")

    for token in check.get("expect_none") or []:
        if token.lower() in ans:
            errors.append(f"should not contain: {token}")

    return errors


def run_checks(client: ChainlitSocket, timeout: int, print_answers: bool) -> int:
    failures = 0
    for idx, check in enumerate(CHECKS, start=1):
        print(f"\nQ{idx}: {check['q']}")
        client.send(check["q"])
        answer = client.answer(timeout=timeout)
        if print_answers:
            print("A:", answer)

        errors = check_expectations(answer, check)
        if errors:
            failures += 1
            print("FAIL:", "; ".join(errors))
        else:
            print("OK")
    return failures


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--ws-url", default=DEFAULT_WS_URL)
    parser.add_argument("--timeout", type=int, default=240)
    parser.add_argument("--print-answers", action="store_true")
    parser.add_argument("--dialog", action="store_true")
    args = parser.parse_args()

    client = ChainlitSocket(args.ws_url)
    client.connect()
    greeting = client.greeting()
    if greeting:
        print("GREETING:", greeting.replace("\n", " "))

    failures = run_checks(client, args.timeout, args.print_answers)
    client.close()

    if failures:
        print(f"\nFAILED: {failures} check(s) failed")
        sys.exit(1)
    print("\nALL OK")

    if args.dialog:
        client = ChainlitSocket(args.ws_url)
        client.connect()
        client.greeting()
        print("\nDIALOGUE:\n")
        for idx, q in enumerate(DIALOGUE, start=1):
            print(f"U{idx}: {q}")
            client.send(q)
            print(f"A{idx}: {client.answer(timeout=args.timeout)}\n")
        client.close()
    return 0


if __name__ == "__main__":
    main()
