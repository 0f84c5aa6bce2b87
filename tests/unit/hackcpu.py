'''
CPU Hack de referencia para los tests: ensambla el texto generado y lo ejecuta
'''

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from src.hackvm.lexer import strip_comment, is_decimal
from src.hackvm.utils import is_unsigned_nbit

# Máscara para 16 bits sin signo
U16_MASK = 0xFFFF

def u16(x: int) -> int:
    """Fuerza el valor al rango de 16 bits sin signo."""
    return x & U16_MASK

def to_signed16(x: int) -> int:
    """Interpreta x como entero de 16 bits en complemento a dos."""
    x &= U16_MASK
    return x - 0x10000 if x & 0x8000 else x

RAM_SIZE = 32768
VARIABLE_BASE = 16

PREDEFINED: Dict[str, int] = {
    "SP": 0, "LCL": 1, "ARG": 2, "THIS": 3, "THAT": 4,
    **{f"R{i}": i for i in range(16)},
    "SCREEN": 16384, "KBD": 24576,
}

LABEL_RE = re.compile(r"^\(([A-Za-z_.$:][\w.$:]*)\)$")
SYMBOL_RE = re.compile(r"^[A-Za-z_.$:][\w.$:]*$")
C_RE = re.compile(r"^(?:(?P<dest>[ADM]{1,3})=)?(?P<comp>[^;=]+)(?:;(?P<jump>J[A-Z]{2}))?$")

Alu = Callable[[int, int, int], int]

# comp -> f(D, A, M); las variantes conmutadas se aceptan también
COMP: Dict[str, Alu] = {
    "0": lambda d, a, m: 0,
    "1": lambda d, a, m: 1,
    "-1": lambda d, a, m: -1,
    "D": lambda d, a, m: d,
    "A": lambda d, a, m: a,
    "M": lambda d, a, m: m,
    "!D": lambda d, a, m: ~d,
    "!A": lambda d, a, m: ~a,
    "!M": lambda d, a, m: ~m,
    "-D": lambda d, a, m: -d,
    "-A": lambda d, a, m: -a,
    "-M": lambda d, a, m: -m,
    "D+1": lambda d, a, m: d + 1,
    "A+1": lambda d, a, m: a + 1,
    "M+1": lambda d, a, m: m + 1,
    "D-1": lambda d, a, m: d - 1,
    "A-1": lambda d, a, m: a - 1,
    "M-1": lambda d, a, m: m - 1,
    "D+A": lambda d, a, m: d + a,
    "D+M": lambda d, a, m: d + m,
    "D-A": lambda d, a, m: d - a,
    "D-M": lambda d, a, m: d - m,
    "A-D": lambda d, a, m: a - d,
    "M-D": lambda d, a, m: m - d,
    "D&A": lambda d, a, m: d & a,
    "D&M": lambda d, a, m: d & m,
    "D|A": lambda d, a, m: d | a,
    "D|M": lambda d, a, m: d | m,
}
for _c in ("D+A", "D+M", "D&A", "D&M", "D|A", "D|M"):
    COMP[_c[2] + _c[1] + _c[0]] = COMP[_c]

JUMP: Dict[Optional[str], Callable[[int], bool]] = {
    None: lambda v: False,
    "JGT": lambda v: v > 0,
    "JEQ": lambda v: v == 0,
    "JGE": lambda v: v >= 0,
    "JLT": lambda v: v < 0,
    "JNE": lambda v: v != 0,
    "JLE": lambda v: v <= 0,
    "JMP": lambda v: True,
}

@dataclass(frozen=True)
class AInstr:
    value: int

@dataclass(frozen=True)
class CInstr:
    dest: str
    comp: str
    jump: Optional[str]

Instr = Union[AInstr, CInstr]

@dataclass
class Program:
    instructions: List[Instr]
    symbols: Dict[str, int]
    variables: Dict[str, int] = field(default_factory=dict)

def assemble(lines: Iterable[str]) -> Program:
    """Dos pasadas: etiquetas '(X)' y luego @símbolos/variables (desde RAM[16])."""
    cores = [c for c in (strip_comment(l) for l in lines) if c]
    symbols = dict(PREDEFINED)
    body: List[str] = []
    for core in cores:
        m = LABEL_RE.match(core)
        if m:
            if m.group(1) in symbols:
                raise ValueError(f"Etiqueta redefinida: {m.group(1)}")
            symbols[m.group(1)] = len(body)
            continue
        body.append(core)

    variables: Dict[str, int] = {}
    instructions: List[Instr] = []
    for core in body:
        if core.startswith("@"):
            tok = core[1:]
            if is_decimal(tok):
                value = int(tok)
                if not is_unsigned_nbit(value, 15):
                    raise ValueError(f"Constante fuera de rango: {tok}")
            elif SYMBOL_RE.match(tok):
                if tok not in symbols:
                    symbols[tok] = variables[tok] = VARIABLE_BASE + len(variables)
                value = symbols[tok]
            else:
                raise ValueError(f"Instrucción A inválida: {core}")
            instructions.append(AInstr(value))
            continue
        m = C_RE.match(core)
        if not m or m.group("comp") not in COMP or m.group("jump") not in JUMP:
            raise ValueError(f"Instrucción C inválida: {core}")
        instructions.append(CInstr(m.group("dest") or "", m.group("comp"), m.group("jump")))
    return Program(instructions, symbols, variables)

class HackCPU:
    """Simulador mínimo: registros A, D, PC y 32K palabras de RAM."""

    def __init__(self, program: Program):
        self.program = program
        self.ram = [0] * RAM_SIZE
        self.a = 0
        self.d = 0
        self.pc = 0
        self.steps = 0

    @classmethod
    def from_text(cls, text: str) -> "HackCPU":
        return cls(assemble(text.splitlines()))

    def __getitem__(self, symbol: Union[str, int]) -> int:
        """Lee RAM por dirección o por símbolo, como entero con signo."""
        addr = symbol if isinstance(symbol, int) else self.program.symbols[symbol]
        return to_signed16(self.ram[addr])

    def __setitem__(self, symbol: Union[str, int], value: int) -> None:
        addr = symbol if isinstance(symbol, int) else self.program.symbols[symbol]
        self.ram[addr] = u16(value)

    @property
    def finished(self) -> bool:
        return self.pc >= len(self.program.instructions)

    @property
    def halted(self) -> bool:
        """Fin del programa o bucle '(X) @X 0;JMP' sobre sí mismo."""
        if self.finished:
            return True
        ins = self.program.instructions
        here = ins[self.pc]
        return (isinstance(here, AInstr) and here.value == self.pc
                and self.pc + 1 < len(ins) and ins[self.pc + 1] == CInstr("", "0", "JMP"))

    def step(self) -> None:
        ins = self.program.instructions[self.pc]
        self.steps += 1
        if isinstance(ins, AInstr):
            self.a = ins.value
            self.pc += 1
            return
        addr = self.a
        m = self.ram[addr] if "M" in ins.comp else 0
        value = u16(COMP[ins.comp](self.d, self.a, m))
        if "M" in ins.dest:
            self.ram[addr] = value
        if "D" in ins.dest:
            self.d = value
        if "A" in ins.dest:
            self.a = value
        if JUMP[ins.jump](to_signed16(value)):
            self.pc = addr
        else:
            self.pc += 1

    def run(self, max_steps: int = 1_000_000, *, stop_at: Optional[str] = None) -> "HackCPU":
        """Ejecuta hasta detenerse, o hasta alcanzar la etiqueta stop_at."""
        target = self.program.symbols[stop_at] if stop_at is not None else None
        while not self.halted:
            if self.pc == target:
                break
            if self.steps >= max_steps:
                raise RuntimeError(f"demasiados pasos ({max_steps}), pc={self.pc}")
            self.step()
        return self
