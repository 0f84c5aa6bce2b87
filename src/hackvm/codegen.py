'''
generador de código: comandos VM -> ensamblador Hack
'''

from __future__ import annotations
from pathlib import Path
from typing import Dict, TextIO

from .commands import ArithOp, Command, CommandType, Segment
from .segments import addressing, segment_of
from .diagnostics import MisuseError, ResourceError

STACK_BASE = 256
ENTRY_FUNCTION = "Sys.init"
FRAME_SIZE = 5   # return address + LCL + ARG + THIS + THAT

# Operadores binarios: M = (segundo) op (tope)
BINARY: Dict[ArithOp, str] = {
    ArithOp.ADD: "M=D+M",
    ArithOp.SUB: "M=M-D",
    ArithOp.AND: "M=D&M",
    ArithOp.OR:  "M=D|M",
}
UNARY: Dict[ArithOp, str] = {
    ArithOp.NEG: "M=-M",
    ArithOp.NOT: "M=!M",
}
COMPARE: Dict[ArithOp, str] = {
    ArithOp.EQ: "JEQ",
    ArithOp.GT: "JGT",
    ArithOp.LT: "JLT",
}

class CodeGenerator:
    """Traduce comandos VM a ensamblador Hack sobre un único destino de texto.

    Una instancia por ejecución: los contadores de etiquetas nunca se
    reinician, ni siquiera al cambiar de archivo, así que las etiquetas
    generadas son únicas en toda la salida.
    """

    def __init__(self, out: TextIO, *, annotate: bool = False):
        self.out = out
        self.annotate = annotate
        self.file_name = ""
        self.current_function = ""
        self._compare_labels = 0
        self._if_labels = 0
        self._return_labels = 0
        self._function_labels = 0

    def set_file_name(self, name: str) -> None:
        """Fija el archivo en curso; 'dir/Main.vm' -> 'Main' (prefijo de static)."""
        self.file_name = Path(name).stem

    # ---- despacho ----

    def write_command(self, cmd: Command) -> None:
        if self.annotate:
            self._emit(f"// {cmd.text}" if cmd.text else f"// {cmd.kind.value}")
        kind = cmd.kind
        if kind is CommandType.ARITHMETIC:
            self.write_arithmetic(cmd.arg1)
        elif kind is CommandType.PUSH or kind is CommandType.POP:
            self.write_push_pop(kind, cmd.arg1, cmd.arg2)
        elif kind is CommandType.LABEL:
            self.write_label(cmd.arg1)
        elif kind is CommandType.GOTO:
            self.write_goto(cmd.arg1)
        elif kind is CommandType.IF_GOTO:
            self.write_if(cmd.arg1)
        elif kind is CommandType.FUNCTION:
            self.write_function(cmd.arg1, cmd.arg2)
        elif kind is CommandType.CALL:
            self.write_call(cmd.arg1, cmd.arg2)
        elif kind is CommandType.RETURN:
            self.write_return()
        else:
            raise MisuseError(f"Comando no soportado: {kind!r}", line=cmd.line)

    # ---- aritmética ----

    def write_arithmetic(self, command: str | ArithOp) -> None:
        try:
            op = ArithOp(command)
        except ValueError:
            raise MisuseError(f"Operador aritmético desconocido: {command}") from None
        if op in BINARY:
            self._binary_header()
            self._emit(BINARY[op])
        elif op in UNARY:
            self._unary_header()
            self._emit(UNARY[op])
        else:
            self._binary_header()
            self._comparison(COMPARE[op])

    # ---- push / pop ----

    def write_push_pop(self, kind: CommandType, segment: str | Segment, index: int) -> None:
        if kind is not CommandType.PUSH and kind is not CommandType.POP:
            raise MisuseError(f"write_push_pop no admite {kind!r}")
        try:
            seg = segment if isinstance(segment, Segment) else segment_of(segment)
        except ValueError as ex:
            raise MisuseError(str(ex)) from None
        if kind is CommandType.POP and seg is Segment.CONSTANT:
            raise MisuseError("pop sobre 'constant' no es una operación válida")

        # A = dirección destino (o la constante)
        mode = addressing(seg)
        if mode.mode == "constant":
            self._emit(f"@{index}")
        elif mode.mode == "indirect":
            self._emit(f"@{mode.base}", "D=M", f"@{index}", "A=D+A")
        elif mode.mode == "direct":
            self._emit(f"@{mode.base}", "D=A", f"@{index}", "A=D+A")
        else:
            self._emit(f"@{self.file_name}.{index}")

        if kind is CommandType.PUSH:
            self._emit("D=A" if seg is Segment.CONSTANT else "D=M")
            self._push_d()
        else:
            # guardar la dirección en R13 antes de mover SP
            self._emit("D=A", "@R13", "M=D")
            self._pop_d()
            self._emit("@R13", "A=M", "M=D")

    # ---- control de flujo ----

    def _scoped(self, label: str) -> str:
        return f"{self.current_function}.{label}"

    def write_label(self, label: str) -> None:
        self._emit(f"({self._scoped(label)})")

    def write_goto(self, label: str) -> None:
        self._emit(f"@{self._scoped(label)}", "0;JMP")

    def write_if(self, label: str) -> None:
        """Salta si el valor desapilado no es 0 (falso)."""
        n = self._if_labels
        self._if_labels += 1
        self._pop_d()
        self._emit(f"@IF_FALSE_{n}", "D;JEQ",
                   f"@{self._scoped(label)}", "0;JMP",
                   f"(IF_FALSE_{n})")

    # ---- funciones ----

    def write_init(self) -> None:
        """Bootstrap: SP = 256 y call Sys.init 0."""
        self._emit(f"@{STACK_BASE}", "D=A", "@SP", "M=D")
        self.write_call(ENTRY_FUNCTION, 0)

    def write_call(self, function_name: str, n_args: int) -> None:
        n = self._return_labels
        self._return_labels += 1
        ret = f"RETURN_{n}"
        self._emit(f"@{ret}", "D=A")
        self._push_d()
        for reg in ("LCL", "ARG", "THIS", "THAT"):
            self._emit(f"@{reg}", "D=M")
            self._push_d()
        self._emit("@SP", "D=M",
                   "@LCL", "M=D",                   # LCL = SP
                   f"@{n_args}", "D=D-A",
                   f"@{FRAME_SIZE}", "D=D-A",
                   "@ARG", "M=D",                   # ARG = SP - n - 5
                   f"@{function_name}", "0;JMP",
                   f"({ret})")

    def write_return(self) -> None:
        self._emit("@LCL", "D=M", "@R13", "M=D",    # FRAME = LCL
                   f"@{FRAME_SIZE}", "A=D-A", "D=M",
                   "@R14", "M=D")                   # RET = *(FRAME - 5)
        self._pop_d()
        self._emit("@ARG", "A=M", "M=D",            # *ARG = pop()
                   "D=A+1", "@SP", "M=D")           # SP = ARG + 1
        for offset, reg in enumerate(("THAT", "THIS", "ARG", "LCL"), start=1):
            self._emit("@R13", "D=M", f"@{offset}", "A=D-A", "D=M",
                       f"@{reg}", "M=D")
        self._emit("@R14", "A=M", "0;JMP")

    def write_function(self, function_name: str, n_locals: int) -> None:
        n = self._function_labels
        self._function_labels += 1
        start, end = f"START_LOOP_{n}", f"END_LOOP_{n}"
        self._emit(f"({function_name})",
                   f"@{n_locals}", "D=A",
                   f"({start})",
                   f"@{end}", "D;JLE",
                   "D=D-1", "@R13", "M=D",          # k-- guardado en R13
                   "@0", "D=A")
        self._push_d()
        self._emit("@R13", "D=M", f"@{start}", "0;JMP",
                   f"({end})")
        self.current_function = function_name

    # ---- secuencias auxiliares ----

    def _binary_header(self) -> None:
        # D = tope, A = dirección del segundo
        self._emit("@SP", "M=M-1", "A=M", "D=M", "A=A-1")

    def _unary_header(self) -> None:
        self._emit("@SP", "A=M", "A=A-1")

    def _comparison(self, jump: str) -> None:
        n = self._compare_labels
        self._compare_labels += 1
        self._emit("D=M-D",
                   f"@TRUE_{n}", f"D;{jump}",
                   "@SP", "A=M-1", "M=0",           # falso
                   f"@END_{n}", "0;JMP",
                   f"(TRUE_{n})",
                   "@SP", "A=M-1", "M=-1",          # verdadero
                   f"(END_{n})")

    def _push_d(self) -> None:
        self._emit("@SP", "A=M", "M=D", "@SP", "M=M+1")

    def _pop_d(self) -> None:
        self._emit("@SP", "M=M-1", "A=M", "D=M")

    def _emit(self, *lines: str) -> None:
        try:
            for line in lines:
                self.out.write(line + "\n")
        except OSError as ex:
            raise ResourceError(f"no pude escribir la salida: {ex}") from ex
