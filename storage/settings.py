from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Optional


@dataclass(frozen=True)
class StorageSettings:
    """
    Where saved deals live. Built explicitly by the caller and handed to
    create_repository(); a settings change means building a new repository.
    """

    backend: Literal["local", "supabase"] = "local"
    root_dir: Path = Path("data") / "deals"

    supabase_url: str = ""
    supabase_key: str = ""
    table: str = "properties"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StorageSettings":
        env = os.environ if environ is None else environ
        backend = env.get("AUCTION_SIM_STORAGE", "local").strip().lower()
        if backend not in ("local", "supabase"):
            raise ValueError(f"AUCTION_SIM_STORAGE must be 'local' or 'supabase', got {backend!r}")
        return cls(
            backend=backend,
            root_dir=Path(env.get("AUCTION_SIM_DATA_DIR", str(cls.root_dir))),
            supabase_url=env.get("SUPABASE_URL", ""),
            supabase_key=env.get("SUPABASE_KEY", ""),
            table=env.get("AUCTION_SIM_TABLE", "properties"),
        )
