"""Process memory inspection and human-readable byte sizes."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

_PROC_STATUS = Path("/proc/self/status")

_KB = 1024.0
_MB = _KB * 1024.0
_GB = _MB * 1024.0


def _field_kib(line: str) -> int | None:
    parts = line.split()
    if len(parts) < 2:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None


def _linux_memory_usage() -> tuple[int, int] | None:
    try:
        contents = _PROC_STATUS.read_text()
    except OSError:
        return None

    rss = vm_size = None
    for line in contents.splitlines():
        if line.startswith("VmRSS:"):
            kib = _field_kib(line)
            if kib is not None:
                rss = kib * 1024
        elif line.startswith("VmSize:"):
            kib = _field_kib(line)
            if kib is not None:
                vm_size = kib * 1024

    if rss is None or vm_size is None:
        return None
    return rss, vm_size


def _macos_memory_usage() -> tuple[int, int] | None:
    try:
        output = subprocess.run(
            ["ps", "-o", "rss,vsz", "-p", str(os.getpid())],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None

    lines = output.stdout.splitlines()
    if len(lines) < 2:
        return None
    parts = lines[1].split()
    if len(parts) < 2:
        return None
    try:
        rss_kib, vsz_kib = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return rss_kib * 1024, vsz_kib * 1024


def get_memory_usage() -> tuple[int, int] | None:
    """Return (resident, virtual) memory of this process in bytes, or None."""
    if sys.platform.startswith("linux"):
        return _linux_memory_usage()
    if sys.platform == "darwin":
        return _macos_memory_usage()
    return None


def format_bytes(size: int) -> str:
    """Format a byte count using B, KB, MB or GB."""
    if size >= _GB:
        return f"{size / _GB:.2f} GB"
    if size >= _MB:
        return f"{size / _MB:.2f} MB"
    if size >= _KB:
        return f"{size / _KB:.2f} KB"
    return f"{size} B"