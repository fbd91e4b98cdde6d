"""Keep a modpack's mods directory in sync with its modlist."""

__version__ = "0.1.0"
