import asyncio
import json
import logging
import subprocess
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import httpx

from src.config.settings import settings
from src.container import configure_container, container
from src.core.errors import IndexLoadError, IngestionError
from src.core.models.chat import ChatHistory
from src.core.protocols.index_store import IndexStoreProtocol
from src.core.services.chat_service import ChatService
from src.core.services.ingest_service import IngestService

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def _model_available(base_url: str, model: str) -> bool:
    resp = httpx.get(f"{base_url}/api/tags", timeout=5)
    resp.raise_for_status()
    names = [m["name"] for m in resp.json().get("models", [])]
    return any(model in name for name in names)


def wait_for_llm(attempts: int = 30, delay: float = 2.0) -> bool:
    """Wait for the Ollama server and make sure the answer model is pulled.

    Returns:
        True once the model is ready, False if the server never came up.
    """
    model = settings.llm_model
    base_url = settings.llm_base_url.removesuffix("/v1").rstrip("/")

    logger.info(f"Checking LLM model: {model} at {base_url}")

    for attempt in range(1, attempts + 1):
        try:
            if _model_available(base_url, model):
                logger.info(f"Model {model} is ready")
                return True

            logger.info(f"Pulling model {model}...")
            pull = httpx.post(f"{base_url}/api/pull", json={"name": model}, timeout=600)
            if pull.status_code == 200:
                logger.info(f"Model {model} pulled")
                return True
            logger.error(f"Failed to pull model: {pull.text}")
            return False
        except httpx.HTTPError as e:
            logger.info(f"Waiting for LLM server ({attempt}/{attempts}): {e}")
            time.sleep(delay)

    logger.error("LLM server not available")
    return False


def run_ingest() -> None:
    """Build and persist the index; exit 1 when ingestion fails."""
    ingest_service = container.resolve(IngestService)
    try:
        metadata = asyncio.run(ingest_service.run())
    except IngestionError as e:
        logger.error(f"Ingestion failed: {e}")
        sys.exit(1)
    logger.info(
        f"Indexed {metadata.chunk_count} chunks from {metadata.source_count} documents "
        f"(version {metadata.version})"
    )


def cmd_startup():
    """Startup command - check model, index, run UI."""
    logger.info("Starting portfolio concierge...")

    if not wait_for_llm():
        sys.exit(1)

    configure_container(settings)
    run_ingest()

    logger.info("Starting Chainlit...")
    subprocess.run(
        [
            sys.executable,
            "-m",
            "chainlit",
            "run",
            "src/presentation/chainlit_app.py",
            "--host",
            "0.0.0.0",
            "--port",
            "8000",
        ]
    )


def cmd_ingest():
    """Ingest command - index documents only."""
    configure_container(settings)
    run_ingest()


async def _health() -> dict:
    store = container.resolve(IndexStoreProtocol)
    try:
        metadata = await store.load_metadata()
    except IndexLoadError as e:
        return {"ok": False, "error": str(e)}
    if metadata is None:
        return {"ok": True, "indexed": False}
    return {"ok": True, "indexed": True, **metadata.to_dict()}


def cmd_health():
    """Health command - print the index metadata record."""
    configure_container(settings)
    report = asyncio.run(_health())
    print(json.dumps(report, indent=2))
    if not report["ok"]:
        sys.exit(1)


async def _ask(question: str, scope: str | None) -> int:
    chat_service = container.resolve(ChatService)
    status = 0
    async for event in chat_service.process_message(question, ChatHistory(), scope=scope):
        if event.type == "chunk":
            print(event.content, end="", flush=True)
        elif event.type == "done":
            print()
            for i, citation in enumerate(event.citations, start=1):
                print(f"[{i}] {citation.title} - {citation.source_url}")
        else:
            print(f"\n{event.content} (ref: {event.correlation_id})")
            status = 1
    return status


def cmd_ask(args: list[str]):
    """Ask command - answer one question in the terminal."""
    scope = None
    if len(args) >= 2 and args[0] == "--scope":
        scope, args = args[1], args[2:]
    if not args:
        print("Usage: python -m src.presentation.cli ask [--scope <doc-id>] <question>")
        sys.exit(1)

    configure_container(settings)
    sys.exit(asyncio.run(_ask(" ".join(args), scope)))


def main():
    """CLI entry point."""
    if len(sys.argv) < 2:
        print("Usage: python -m src.presentation.cli <command>")
        print("Commands: startup, ingest, health, ask")
        sys.exit(1)

    command = sys.argv[1]

    if command == "startup":
        cmd_startup()
    elif command == "ingest":
        cmd_ingest()
    elif command == "health":
        cmd_health()
    elif command == "ask":
        cmd_ask(sys.argv[2:])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
