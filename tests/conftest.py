"""Pytest configuration and shared fixtures.

No sys.path hacks - tests import from the installed lineageflow package.
"""

import asyncio
import os
from pathlib import Path

import pytest

from lineageflow.kernel.ids import CounterIdAllocator
from lineageflow.kernel.model import Column, GraphDocument, LineageEdge, Position, Table


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


def pytest_sessionfinish(session, exitstatus):
    """Best-effort cleanup for basetemp on Windows without patching pytest internals."""
    if os.name != "nt":
        return
    basetemp = getattr(session.config.option, "basetemp", None)
    if not basetemp:
        return
    basetemp_path = Path(basetemp)
    if not basetemp_path.exists():
        return
    try:
        import shutil
        shutil.rmtree(basetemp_path)
    except (PermissionError, OSError):
        # If cleanup fails, let it surface as a warning rather than masking errors.
        import warnings
        warnings.warn(f"Could not remove basetemp: {basetemp_path}")


class RecordingRenderer:
    """Renderer double that keeps every posted message."""

    def __init__(self):
        self.messages: list[dict] = []

    def post_message(self, message: dict) -> None:
        self.messages.append(message)

    def of_type(self, message_type: str) -> list[dict]:
        return [m for m in self.messages if m["type"] == message_type]

    @property
    def last_view(self) -> dict | None:
        views = self.of_type("updateData")
        return views[-1] if views else None


class ScriptedHost:
    """Host double answering prompts and pickers from queued answers.

    An exhausted queue answers None (the user dismissed the prompt).
    """

    def __init__(self, prompts=None, choices=None, open_paths=None, save_paths=None, prompt_yields=0):
        self.prompt_answers = list(prompts or [])
        self.choice_answers = list(choices or [])
        self.open_path_answers = list(open_paths or [])
        self.save_path_answers = list(save_paths or [])
        self.prompt_yields = prompt_yields
        self.prompts_seen: list[tuple[str, str]] = []
        self.infos: list[str] = []
        self.errors: list[str] = []

    async def prompt_text(self, prompt, value):
        self.prompts_seen.append((prompt, value))
        # Suspend like a real dialog so other intents can be delivered meanwhile
        for _ in range(self.prompt_yields):
            await asyncio.sleep(0)
        return self.prompt_answers.pop(0) if self.prompt_answers else None

    async def pick_choice(self, placeholder, choices):
        return self.choice_answers.pop(0) if self.choice_answers else None

    async def pick_open_path(self, title, filters):
        return self.open_path_answers.pop(0) if self.open_path_answers else None

    async def pick_save_path(self, title, filters):
        return self.save_path_answers.pop(0) if self.save_path_answers else None

    def show_info(self, message):
        self.infos.append(message)

    def show_error(self, message):
        self.errors.append(message)


@pytest.fixture
def ids():
    return CounterIdAllocator(start=100)


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def host():
    return ScriptedHost()


@pytest.fixture
def sample_document():
    """Orders(id, total) and Customers(id) with one edge Customers.id -> Orders.id."""
    return GraphDocument(
        tables=[
            Table(
                id="T1",
                name="Orders",
                position=Position(x=0.0, y=0.0),
                columns=[Column(id="C2", name="id"), Column(id="C3", name="total")],
            ),
            Table(
                id="T4",
                name="Customers",
                position=Position(x=300.0, y=0.0),
                columns=[Column(id="C5", name="id")],
            ),
        ],
        lineage=[
            LineageEdge(id="E6", source="C5", target="C2", description="customer key"),
        ],
    )


@pytest.fixture
def make_host():
    """Factory for a ScriptedHost with queued answers."""
    return ScriptedHost
