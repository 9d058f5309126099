"""Application preferences (persisted to disk)."""

from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, asdict
from pathlib import Path

from ..core.operation import ChainMode, OriginMode


@dataclass
class AppSettings:
    """User preferences, serialized to ~/.dxfcam/settings.json."""

    default_chain_mode: str = ChainMode.EXACT.value
    default_origin: str = OriginMode.CENTER.value
    default_precision: int = 4
    extended_preamble: bool = False
    last_open_dir: str = ""
    last_save_dir: str = ""

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".dxfcam" / "settings.json"

    def save(self) -> None:
        p = self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(asdict(self), indent=2))

    def _reset_unknown_modes(self) -> None:
        """Fall back to the stock modes for values no enum member accepts."""
        for name, enum, default in (
            ("default_chain_mode", ChainMode, ChainMode.EXACT),
            ("default_origin", OriginMode, OriginMode.CENTER),
        ):
            value = getattr(self, name)
            if value not in {m.value for m in enum}:
                warnings.warn(
                    f"Ignoring unknown {name} {value!r} in {self._path()}",
                    UserWarning,
                    stacklevel=3,
                )
                setattr(self, name, default.value)

    @classmethod
    def load(cls) -> "AppSettings":
        p = cls._path()
        if p.exists():
            data = json.loads(p.read_text())
            settings = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
            settings._reset_unknown_modes()
            return settings
        return cls()
