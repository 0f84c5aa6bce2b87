'''
vocabulario de comandos VM (CommandType, ArithOp, Segment, Command)
'''

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

class CommandType(Enum):
    """Tipo de comando VM; conjunto cerrado."""
    ARITHMETIC = "arithmetic"
    PUSH = "push"
    POP = "pop"
    LABEL = "label"
    GOTO = "goto"
    IF_GOTO = "if-goto"
    FUNCTION = "function"
    CALL = "call"
    RETURN = "return"

class ArithOp(Enum):
    """Operadores aritmético-lógicos, con su nombre en el lenguaje VM."""
    ADD = "add"
    SUB = "sub"
    NEG = "neg"
    EQ = "eq"
    GT = "gt"
    LT = "lt"
    AND = "and"
    OR = "or"
    NOT = "not"

class Segment(Enum):
    """Segmentos de memoria direccionables por push/pop."""
    CONSTANT = "constant"
    LOCAL = "local"
    ARGUMENT = "argument"
    THIS = "this"
    THAT = "that"
    POINTER = "pointer"
    TEMP = "temp"
    STATIC = "static"

# Mnemónico (en minúsculas) -> tipo de comando
KEYWORDS = {
    **{op.value: CommandType.ARITHMETIC for op in ArithOp},
    "push": CommandType.PUSH,
    "pop": CommandType.POP,
    "label": CommandType.LABEL,
    "goto": CommandType.GOTO,
    "if-goto": CommandType.IF_GOTO,
    "function": CommandType.FUNCTION,
    "call": CommandType.CALL,
    "return": CommandType.RETURN,
}

@dataclass(frozen=True)
class Command:
    """Un comando VM ya parseado.

    - arg1: operador, segmento, etiqueta o nombre de función (None en return)
    - arg2: índice del segmento, nº de locales o nº de argumentos (0 si no aplica)
    - line: línea 1-based en el archivo fuente
    - text: la línea fuente sin comentario
    """
    kind: CommandType
    arg1: Optional[str] = None
    arg2: int = 0
    line: int = 0
    text: str = ""
