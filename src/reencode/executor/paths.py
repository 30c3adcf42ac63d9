"""Output file naming."""

from __future__ import annotations

from pathlib import Path


def build_output_path(
    output_dir: Path | str | None, base_name: str, size: str, extension: str
) -> Path:
    """Join ``<dir>/<base>.<size>.<ext>``; an empty size tag is left out."""
    parts = [base_name]
    if size:
        parts.append(size)
    name = ".".join(parts)
    if extension:
        name = f"{name}.{extension}"
    return Path(output_dir or "") / name


def get_safe_path(path: Path) -> Path:
    """Return ``path`` or the first ``<stem>.<N><suffix>`` that does not exist.

    ``movie.720p.mp4`` becomes ``movie.720p.1.mp4``, then
    ``movie.720p.2.mp4`` and so on. This is a check-then-use sequence and
    is not safe against another process creating the same file.
    """
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}.{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1
