"""Run configuration."""

from dataclasses import dataclass
from pathlib import Path

API_KEY_ENV = "CURSE_API_KEY"
DEFAULT_MODS_FILE = "modlist.json"
DEFAULT_MODS_SUBDIR = Path(".minecraft") / "mods"


class ConfigError(Exception):
    """Raised when startup arguments or credentials are missing or invalid."""

    pass


@dataclass
class SyncConfig:
    api_key: str
    base_dir: Path
    mods_dir: Path
    mods_file: Path

    @classmethod
    def build(
        cls,
        base_dir: Path,
        api_key: str | None,
        mods_file: Path | None = None,
        mods_dir: Path | None = None,
    ) -> "SyncConfig":
        """
        Resolve a config from the modpack base directory.

        The manifest defaults to ``base_dir/modlist.json`` and the mods
        directory to ``base_dir/.minecraft/mods``.
        """
        if not api_key or not api_key.strip():
            raise ConfigError(
                f"No API key provided. Set {API_KEY_ENV} environment variable "
                "or pass --api-key flag."
            )

        return cls(
            api_key=api_key.strip(),
            **resolve_paths(base_dir, mods_file, mods_dir),
        )


def resolve_paths(
    base_dir: Path,
    mods_file: Path | None = None,
    mods_dir: Path | None = None,
) -> dict[str, Path]:
    """Apply path defaults relative to base_dir. No API key needed."""
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        raise ConfigError(f"Modpack directory not found: {base_dir}")

    return {
        "base_dir": base_dir,
        "mods_dir": Path(mods_dir) if mods_dir else base_dir / DEFAULT_MODS_SUBDIR,
        "mods_file": Path(mods_file) if mods_file else base_dir / DEFAULT_MODS_FILE,
    }
