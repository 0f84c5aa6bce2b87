# src/hackvm/parser.py
from __future__ import annotations
from typing import Iterable, Iterator, List, Optional

from .lexer import strip_comment, split_mnemonic, is_decimal
from .commands import ArithOp, Command, CommandType, KEYWORDS, Segment
from .segments import is_segment
from .utils import is_unsigned_nbit, A_VALUE_BITS
from .diagnostics import MalformedIntegerError, ResourceError, VMSyntaxError

BRANCHES = {CommandType.LABEL, CommandType.GOTO, CommandType.IF_GOTO}
FUNCTIONS = {CommandType.FUNCTION, CommandType.CALL}

class Reader:
    """
    Lector de comandos VM sobre una fuente de líneas (archivo abierto, lista, ...).

    Uso:
        r = Reader(f, filename="Main.vm")
        while r.has_more_commands():
            cmd = r.advance()

    Reglas:
      - Comentarios: '//' hasta fin de línea; líneas vacías se ignoran.
      - Las palabras clave no distinguen mayúsculas; el resto de tokens sí.
      - Los números de línea cuentan todas las líneas físicas (1-based).
      - Cualquier error es fatal y se lanza como TranslationError.
    """

    def __init__(self, lines: Iterable[str], *, filename: Optional[str] = None):
        self.filename = filename
        self._lines = iter(lines)
        self._lineno = 0
        self._pending: Optional[tuple[int, str]] = None
        self._next_line()

    def has_more_commands(self) -> bool:
        return self._pending is not None

    def advance(self) -> Command:
        """Parsea la siguiente línea útil. Sin más comandos lanza StopIteration."""
        if self._pending is None:
            raise StopIteration
        lineno, core = self._pending
        cmd = self._parse_line(core, lineno)
        self._next_line()
        return cmd

    def __iter__(self) -> Iterator[Command]:
        while self.has_more_commands():
            yield self.advance()

    # ---- internos ----

    def _next_line(self) -> None:
        self._pending = None
        while True:
            try:
                raw = next(self._lines)
            except StopIteration:
                return
            except (OSError, UnicodeDecodeError) as ex:
                raise ResourceError(f"no pude leer la entrada: {ex}",
                                    line=self._lineno + 1, file=self.filename) from ex
            self._lineno += 1
            core = strip_comment(raw)
            if core:
                self._pending = (self._lineno, core)
                return

    def _syntax(self, message: str, lineno: int, hint: str | None = None) -> VMSyntaxError:
        return VMSyntaxError(f"Error de sintaxis: {message}", line=lineno,
                             file=self.filename, hint=hint)

    def _int(self, token: str, lineno: int) -> int:
        if not is_decimal(token):
            raise MalformedIntegerError(f"Entero inválido: '{token}'", line=lineno,
                                        file=self.filename,
                                        hint="se espera un entero decimal no negativo")
        value = int(token, 10)
        if not is_unsigned_nbit(value, A_VALUE_BITS):
            raise MalformedIntegerError(f"Entero fuera de rango: {value}", line=lineno,
                                        file=self.filename,
                                        hint="el máximo representable es 32767")
        return value

    def _expect(self, args: List[str], n: int, lineno: int) -> None:
        """Exige exactamente n argumentos tras el mnemónico."""
        if len(args) < n:
            raise self._syntax("faltan argumentos del comando", lineno)
        if len(args) > n:
            raise self._syntax(f"token desconocido '{args[n]}'", lineno)

    def _parse_line(self, core: str, lineno: int) -> Command:
        mnemonic, args = split_mnemonic(core)
        kind = KEYWORDS.get(mnemonic)
        if kind is None:
            raise self._syntax(f"'{mnemonic}' no es un comando", lineno)

        if kind is CommandType.ARITHMETIC:
            self._expect(args, 0, lineno)
            return Command(kind, ArithOp(mnemonic).value, 0, lineno, core)

        if kind in (CommandType.PUSH, CommandType.POP):
            self._expect(args, 2, lineno)
            segment, index = args
            if not is_segment(segment):
                raise self._syntax(f"segmento desconocido '{segment}'", lineno)
            if kind is CommandType.POP and segment == Segment.CONSTANT.value:
                raise self._syntax("no se puede hacer pop sobre 'constant'", lineno,
                                   hint="constant solo admite push")
            return Command(kind, segment, self._int(index, lineno), lineno, core)

        if kind in BRANCHES:
            self._expect(args, 1, lineno)
            return Command(kind, args[0], 0, lineno, core)

        if kind in FUNCTIONS:
            self._expect(args, 2, lineno)
            name, count = args
            return Command(kind, name, self._int(count, lineno), lineno, core)

        # return: el resto de tokens no se valida
        return Command(CommandType.RETURN, None, 0, lineno, core)

def parse_text(text: str, *, filename: Optional[str] = None) -> List[Command]:
    """Parsea un texto VM completo y devuelve la lista de comandos."""
    return list(Reader(text.splitlines(), filename=filename))
