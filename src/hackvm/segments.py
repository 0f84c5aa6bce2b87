'''
segmentos VM -> modo de direccionamiento y símbolo base en Hack
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Literal, Optional

from .commands import Segment

# Modos de cálculo de la dirección destino
Mode = Literal["indirect", "direct", "symbolic", "constant"]

@dataclass(frozen=True)
class Addressing:
    """Cómo se obtiene la dirección de segment[index].

    - indirect: RAM[base] + index   (base es un registro puntero: LCL, ARG, ...)
    - direct:   base + index        (base es una dirección fija: THIS=3, R5=5)
    - symbolic: <archivo>.<index>   (variable del ensamblador)
    - constant: el propio index, sin acceso a memoria
    """
    mode: Mode
    base: Optional[str] = None

ADDRESSING: Dict[Segment, Addressing] = {
    Segment.CONSTANT: Addressing("constant"),
    Segment.LOCAL:    Addressing("indirect", "LCL"),
    Segment.ARGUMENT: Addressing("indirect", "ARG"),
    Segment.THIS:     Addressing("indirect", "THIS"),
    Segment.THAT:     Addressing("indirect", "THAT"),
    Segment.POINTER:  Addressing("direct", "THIS"),   # THIS = 3
    Segment.TEMP:     Addressing("direct", "R5"),     # R5 = 5
    Segment.STATIC:   Addressing("symbolic"),
}

_BY_NAME: Dict[str, Segment] = {s.value: s for s in Segment}

def is_segment(token: str) -> bool:
    """Indica si el token es un nombre de segmento válido."""
    return token in _BY_NAME

def segment_of(token: str) -> Segment:
    """Devuelve el Segment para el nombre dado o lanza ValueError.

    Los nombres de segmento distinguen mayúsculas ('Local' no es válido).
    """
    try:
        return _BY_NAME[token]
    except KeyError:
        raise ValueError(f"Segmento inválido: {token}") from None

def addressing(segment: Segment) -> Addressing:
    return ADDRESSING[segment]
