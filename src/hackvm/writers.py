from __future__ import annotations
import os
from typing import TextIO

from .diagnostics import ResourceError

def open_source(path: str) -> TextIO:
    try:
        return open(path, "r", encoding="utf-8")
    except OSError as ex:
        raise ResourceError(f"no pude leer {path}: {ex}", file=path) from ex

def open_output(path: str) -> TextIO:
    try:
        return open(path, "w", encoding="utf-8", newline="\n")
    except OSError as ex:
        raise ResourceError(f"no pude crear {path}: {ex}", file=path) from ex

def remove_partial(path: str) -> None:
    """Borra una salida a medio escribir; si ya no existe, no hace nada."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
