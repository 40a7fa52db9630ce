"""
Validadores específicos para India (GSTIN)
"""
import re
from typing import Optional


GSTIN_PATTERN = re.compile(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$')


def normalize_gstin(gstin: Optional[str]) -> Optional[str]:
    """
    Normaliza un GSTIN: quita espacios y lo pasa a mayúsculas.
    Retorna None para valores vacíos.
    """
    if gstin is None:
        return None
    cleaned = re.sub(r'\s', '', gstin).upper()
    return cleaned or None


def validate_gstin(gstin: str) -> bool:
    """
    Valida el formato de un GSTIN (15 caracteres).
    - 2 dígitos de código de estado
    - 10 caracteres del PAN (5 letras, 4 dígitos, 1 letra)
    - 1 carácter de número de registro
    - 'Z' fijo
    - 1 carácter de control
    """
    return bool(GSTIN_PATTERN.match(gstin))
