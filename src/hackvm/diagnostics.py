'''
clase Diagnostic y excepciones fatales de la traducción
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Literal

# Severidad de los diagnósticos (en español)
Severity = Literal["error", "advertencia", "nota"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "advertencia": "ADVERTENCIA",
    "nota": "NOTA",
}

@dataclass(frozen=True)
class Diagnostic:
    """Estructura de un diagnóstico para reportar problemas.

    Ubicación opcional (archivo y línea) y un mensaje de ayuda (pista)
    para orientar la corrección.
    """
    severity: Severity
    message: str
    line: Optional[int] = None
    hint: Optional[str] = None
    file: Optional[str] = None

    def __str__(self) -> str:
        loc = ""
        if self.file is not None:
            loc += f"{self.file}:"
        if self.line is not None:
            loc += f"{self.line}:"
        if loc:
            loc += " "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.hint:
            core += f"  (pista: {self.hint})"
        return loc + core

def error(message: str, *, line: int | None = None,
          file: str | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic("error", message, line, hint, file)

def warning(message: str, *, line: int | None = None,
            file: str | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo advertencia."""
    return Diagnostic("advertencia", message, line, hint, file)

# ---- Errores fatales ----

class TranslationError(Exception):
    """Error que aborta la traducción en curso. Lleva su Diagnostic."""

    def __init__(self, message: str, *, line: int | None = None,
                 file: str | None = None, hint: str | None = None):
        self.diagnostic = error(message, line=line, file=file, hint=hint)
        super().__init__(str(self.diagnostic))

    @property
    def line(self) -> Optional[int]:
        return self.diagnostic.line

class VMSyntaxError(TranslationError):
    """Tokens de más o de menos, comando o segmento desconocido."""

class MalformedIntegerError(TranslationError):
    """Índice o contador que no es un entero decimal no negativo."""

class ResourceError(TranslationError):
    """No se pudo abrir, leer o escribir un archivo."""

class MisuseError(TranslationError):
    """El generador recibió un comando que no sabe traducir."""
