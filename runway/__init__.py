"""Runway - incremental asset sync and codegen for Roblox projects.

Syncs image, audio and model files to a local content cache or to Roblox
Open Cloud, and generates source files mapping asset paths to asset IDs.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ProjectConfig",
    "load_config",
    "SyncEngine",
    "SyncReport",
    "SyncOptions",
    "run_sync",
    "RunwayError",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("ProjectConfig", "load_config"):
        from runway import config

        return getattr(config, name)
    if name in ("SyncEngine", "SyncReport"):
        from runway.sync import engine

        return getattr(engine, name)
    if name in ("SyncOptions", "run_sync"):
        from runway.sync import session

        return getattr(session, name)
    if name == "RunwayError":
        from runway.exceptions import RunwayError

        return RunwayError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
