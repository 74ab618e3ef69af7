from datetime import datetime, timezone
from pathlib import Path

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_files(directory: Path, *names: str) -> list[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in names:
        p = directory / name
        p.write_text("x", encoding="utf-8")
        paths.append(p)
    return paths


def remaining(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir())
