"""Collaborator interfaces the synchronization controller talks to.

The host application shell implements Host (prompts, file pickers,
notifications); the visual panel implements Renderer (receives outbound
protocol payloads). Both are structural protocols, nothing to subclass.
"""

from pathlib import Path
from typing import Dict, List, Optional, Protocol


FileFilters = Dict[str, List[str]]  # label -> extensions, e.g. {"CSV files": ["csv"]}


class Renderer(Protocol):
    """Receives outbound messages (already serialized to plain dicts)."""

    def post_message(self, message: dict) -> None:
        ...


class Host(Protocol):
    """User-facing collaborators. Every await may return None if the user dismisses it."""

    async def prompt_text(self, prompt: str, value: str) -> Optional[str]:
        ...

    async def pick_choice(self, placeholder: str, choices: List[str]) -> Optional[str]:
        ...

    async def pick_open_path(self, title: str, filters: FileFilters) -> Optional[Path]:
        ...

    async def pick_save_path(self, title: str, filters: FileFilters) -> Optional[Path]:
        ...

    def show_info(self, message: str) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...
