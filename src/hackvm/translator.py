from __future__ import annotations
import argparse, io, sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from .commands import CommandType
from .parser import Reader
from .codegen import CodeGenerator, ENTRY_FUNCTION
from .diagnostics import ResourceError, TranslationError, warning
from .writers import open_source, open_output, remove_partial

@dataclass
class TranslationResult:
    files: List[str] = field(default_factory=list)
    commands: int = 0
    functions: List[str] = field(default_factory=list)

def translate_unit(gen: CodeGenerator, lines: Iterable[str], filename: str,
                   result: Optional[TranslationResult] = None) -> TranslationResult:
    """Vuelca todos los comandos de un archivo .vm en el generador."""
    result = result if result is not None else TranslationResult()
    gen.set_file_name(filename)
    reader = Reader(lines, filename=filename)
    while reader.has_more_commands():
        cmd = reader.advance()
        gen.write_command(cmd)
        result.commands += 1
        if cmd.kind is CommandType.FUNCTION:
            result.functions.append(cmd.arg1)
    result.files.append(filename)
    return result

def translate_text(text: str, *, filename: str = "Main.vm",
                   bootstrap: bool = False, annotate: bool = False) -> str:
    """Traduce un único texto VM y devuelve el ensamblador.
    Sin bootstrap por defecto: pensado para fragmentos sueltos."""
    out = io.StringIO()
    gen = CodeGenerator(out, annotate=annotate)
    if bootstrap:
        gen.write_init()
    translate_unit(gen, text.splitlines(), filename)
    return out.getvalue()

def translate_files(paths: Iterable[str], out: TextIO, *,
                    bootstrap: bool = True, annotate: bool = False) -> TranslationResult:
    """Traduce varios archivos .vm, en orden, hacia un único destino."""
    gen = CodeGenerator(out, annotate=annotate)
    if bootstrap:
        gen.write_init()
    result = TranslationResult()
    for path in paths:
        with open_source(path) as f:
            translate_unit(gen, f, path, result)
    return result

def collect_sources(source: str) -> List[str]:
    """Un archivo .vm, o todos los .vm directamente dentro de un directorio
    (orden alfabético)."""
    p = Path(source)
    if p.is_dir():
        files = sorted(str(f) for f in p.iterdir() if f.is_file() and f.suffix == ".vm")
        if not files:
            raise ResourceError(f"no hay archivos .vm en {source}", file=source)
        return files
    if not p.exists():
        raise ResourceError(f"no existe {source}", file=source)
    if p.suffix != ".vm":
        raise ResourceError(f"{source} no es un archivo .vm", file=source,
                            hint="pase un archivo .vm o un directorio")
    return [str(p)]

def output_path_for(source: str) -> str:
    """'dir/Prog.vm' -> 'dir/Prog.asm'; directorio 'dir' -> 'dir/dir.asm'."""
    p = Path(source)
    if p.is_dir():
        return str(p / (p.resolve().name + ".asm"))
    return str(p.with_suffix(".asm"))

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="VM -> Hack assembly translator")
    ap.add_argument("source", help="archivo .vm o directorio con archivos .vm")
    ap.add_argument("-o", "--output", help="archivo .asm de salida (por defecto junto a la entrada)")
    ap.add_argument("--no-bootstrap", dest="bootstrap", action="store_false",
                    help=f"no emitir el arranque (SP=256, call {ENTRY_FUNCTION})")
    ap.add_argument("--annotate", action="store_true",
                    help="emitir cada comando VM como comentario antes de su código")
    args = ap.parse_args(argv)

    try:
        sources = collect_sources(args.source)
    except ResourceError as ex:
        print(ex.diagnostic, file=sys.stderr)
        return 2

    out_path = args.output or output_path_for(args.source)
    try:
        out = open_output(out_path)
    except ResourceError as ex:
        print(ex.diagnostic, file=sys.stderr)
        return 2

    try:
        with out:
            result = translate_files(sources, out, bootstrap=args.bootstrap,
                                     annotate=args.annotate)
    except TranslationError as ex:
        # no dejamos una salida a medias
        print(ex.diagnostic, file=sys.stderr)
        remove_partial(out_path)
        return 2 if isinstance(ex, ResourceError) else 1

    if args.bootstrap and ENTRY_FUNCTION not in result.functions:
        print(warning(f"no se definió {ENTRY_FUNCTION}; el arranque no tiene a dónde saltar",
                      hint="use --no-bootstrap para programas sin Sys.init"), file=sys.stderr)

    print(f"OK: {result.commands} comandos de {len(result.files)} archivo(s) → {out_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
