# Runway Output Module
# Rich console output

from runway.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
