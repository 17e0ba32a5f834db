"""Book configuration, theme loading, output cleaning, gitignore matching and poll-based change watching."""

__version__ = "0.4.51"

__all__ = ["settings", "config", "theme", "cleaning", "ignore", "watcher"]