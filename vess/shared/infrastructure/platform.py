"""Platform context handed to infrastructure at startup."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, MutableMapping, Optional


@dataclass(frozen=True)
class PlatformContext:
    """What the bootstrap knows about the host platform.

    Built once by the entry point and passed explicitly to whatever needs
    it; there is no process-wide instance.

    Attributes:
        target: Deployment target name (``desktop``, ``embedded``, ``memory``)
        data_dir: Directory for durable files
        preferences: Key-value handle for targets backed by a mapping
    """

    target: str
    data_dir: Path = Path("data")
    preferences: Optional[MutableMapping[str, Any]] = field(default=None, compare=False)

    def resolve(self, filename: str) -> Path:
        return self.data_dir / filename
