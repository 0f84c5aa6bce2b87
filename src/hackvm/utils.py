'''
 rangos de palabras Hack
'''

from __future__ import annotations

# Una instrucción A carga constantes de 15 bits (0..32767)
A_VALUE_BITS = 15

def is_unsigned_nbit(x: int, n: int) -> bool:
    """Devuelve True si x está en [0, 2^n) (sin signo de n bits)."""
    if n <= 0:
        raise ValueError("n debe ser positivo")
    return 0 <= x < (1 << n)
