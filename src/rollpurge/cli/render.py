from __future__ import annotations

from rich.console import Console

# No explicit file: Rich resolves sys.stdout on every write.
RENDER = Console(soft_wrap=True, highlight=False)
