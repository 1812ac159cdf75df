"""Anonymize recorded Nubarium responses so they can be committed as test fixtures.

Replacement is keyed on JSON field names (names, addresses, service numbers,
amounts, dates) plus a few value heuristics for anything that slips through
(emails, phone numbers, long digit runs). Output is deterministic per file
except for fake dates, which are relative to today.
"""

from __future__ import annotations

import json
import random
import re
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable

PII_KEY_RE = re.compile(
    r"(?i)^(nombre|calle|colonia|ciudad|cp|codigoPostal|numeroServicio|numeroMedidor|referencia|codigoBarras"
    r"|codigoNumerico|codigoValidacion|qr|rmu2|multiplicador|tarifa|status|tipo|claveMensaje)$"
)
AMOUNT_KEY_RE = re.compile(r"(?i)^(totalPagar|totalPagar2)$")
DATE_KEY_RE = re.compile(r"(?i)^(fecha|fechaLimitePago|periodoFacturado)$")

ANON_EMAIL = "anon@example.com"
ANON_PHONE = "+520000000000"
ANON_AMOUNT = "100.00"

# keys are lowercase; values ending in "-" get a per-file token appended
_PLACEHOLDERS = {
    "nombre": "ANON USER",
    "calle": "CALLE FALSA 123",
    "colonia": "COLONIA FALSA",
    "ciudad": "CIUDAD ANON",
    "cp": "00000",
    "codigopostal": "00000",
    "qr": "QR-ANON-",
    "codigobarras": "CB-ANON-",
    "codigonumerico": "ANON-",
    "codigovalidacion": "ANON-",
    "rmu2": "ANON-",
    "multiplicador": "ANON-",
    "referencia": "ANON-",
    "numeroservicio": "ANON-",
    "numeromedidor": "ANON-",
    "tarifa": "T-ANON",
    "status": "OK",
    "tipo": "ANON",
    "clavemensaje": "MENSAJE-ANON",
}


def hash_like(s: str) -> str:
    """32-bit FNV-1a of s as 8 hex chars (stable short token)."""
    h = 2166136261
    for b in s.encode("utf-8"):
        h ^= b
        h = (h * 16777619) & 0xFFFFFFFF
    return f"{h:08x}"


def placeholder_for_key(key: str, context: str) -> str:
    p = _PLACEHOLDERS.get(key.lower(), "ANON")
    if p.endswith("-"):
        return p + hash_like(context)
    return p


def looks_like_email(s: str) -> bool:
    return "@" in s and "." in s


def looks_like_phone(s: str) -> bool:
    digits = sum(1 for ch in s if "0" <= ch <= "9")
    return 10 <= digits <= 15


def looks_like_big_number(s: str) -> bool:
    return len(s) >= 8 and all("0" <= ch <= "9" for ch in s)


def fake_date(rnd: random.Random, *, today: date | None = None) -> str:
    """A YYYY-MM-DD date within the last two years."""
    today = today or date.today()
    return (today - timedelta(days=rnd.randrange(365 * 2))).isoformat()


def path_seed(path: str) -> int:
    return len(path) + sum(path.encode("utf-8"))


def sanitize_value(key: str, v: Any, context: str, rnd: random.Random) -> Any:
    if isinstance(v, dict):
        return {k: sanitize_value(k, vv, context, rnd) for k, vv in v.items()}
    if isinstance(v, list):
        return [sanitize_value(key, item, context, rnd) for item in v]
    if isinstance(v, str):
        if AMOUNT_KEY_RE.match(key):
            return ANON_AMOUNT
        if DATE_KEY_RE.match(key):
            return fake_date(rnd)
        if PII_KEY_RE.match(key):
            return placeholder_for_key(key, context)
        if looks_like_email(v):
            return ANON_EMAIL
        if looks_like_phone(v):
            return ANON_PHONE
        if looks_like_big_number(v):
            return "X" * len(v)
        return v
    # bool is an int subclass; leave flags alone
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        if AMOUNT_KEY_RE.match(key):
            return 100.0
        if PII_KEY_RE.match(key):
            return float(100000 + rnd.randrange(900000))
        return v
    return v


def sanitize_file(path: Path) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    rnd = random.Random(path_seed(str(path)))
    sanitized = sanitize_value("", data, path.name, rnd)
    path.write_text(json.dumps(sanitized, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def sanitize_directory(root: Path, *, on_file: Callable[[Path], None] | None = None) -> list[Path]:
    """Sanitize every *.json under root (recursively); returns the rewritten paths."""
    if not root.is_dir():
        raise FileNotFoundError(f"Fixtures directory not found: {root}")

    done: list[Path] = []
    for p in sorted(root.rglob("*")):
        if not p.is_file() or p.suffix.lower() != ".json":
            continue
        try:
            sanitize_file(p)
        except (OSError, ValueError) as e:
            raise RuntimeError(f"{p}: {e}") from e
        done.append(p)
        if on_file:
            on_file(p)
    return done
