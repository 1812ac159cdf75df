#!/usr/bin/env python3
"""Send a proof-of-address document to Nubarium's comprobante_domicilio OCR endpoint.

URLs are sent as-is; local files are base64 encoded first.

Usage:
  python3 scripts/comprobante_domicilio.py ./recibo.jpg
  python3 scripts/comprobante_domicilio.py https://example.com/recibo.pdf

Env:
  NUBARIUM_ENDPOINT, NUBARIUM_USERNAME, NUBARIUM_PASSWORD (or put them in .env)
"""

from __future__ import annotations

import argparse
import base64
import json
import logging
import sys
from pathlib import Path

from nubarium.client import NubariumClient, NubariumRequestError, NubariumResponseError


def document_source(arg: str) -> str:
    if arg.startswith("https://") or arg.startswith("http://"):
        print(f"Using URL: {arg}\n")
        return arg
    data = Path(arg).expanduser().read_bytes()
    print(f"Using local file (base64 encoded): {arg}\n")
    return base64.b64encode(data).decode("ascii")


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("input", help="Image/PDF file path or http(s) URL")
    ap.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        client = NubariumClient.from_env()
        source = document_source(args.input)
        result = client.send_comprobante_domicilio(source)
    except (RuntimeError, OSError, NubariumRequestError, NubariumResponseError) as e:
        print(f"Error sending request: {e}", file=sys.stderr)
        raise SystemExit(1)

    print("=== Comprobante Domicilio OCR Results ===")
    print(f"\nStatus: {result.status}")
    print(f"Tipo: {result.tipo}")
    print(f"Nombre: {result.nombre}")
    print(f"Número de Servicio: {result.numero_servicio}")
    print(f"Total a Pagar: ${result.total_pagar}")
    print(f"Fecha Límite de Pago: {result.fecha_limite_pago}")
    if result.parsed_date:
        print(f"Fecha: {result.fecha} ({result.parsed_date.date().isoformat()})")
    else:
        print(f"Fecha: {result.fecha} (unparsed: {result.date_error})")

    print("\nDirección:")
    print(f"  Calle: {result.calle}")
    print(f"  Colonia: {result.colonia}")
    print(f"  Ciudad: {result.ciudad}")
    print(f"  CP: {result.cp}")

    v = result.validaciones
    print("\nValidaciones:")
    print(f"  Código Numérico: {v.codigo_numerico}")
    print(f"  Fecha: {v.fecha}")
    print(f"  Número Servicio: {v.numero_servicio}")
    print(f"  Tarifa: {v.tarifa}")
    print(f"  Total a Pagar: {v.total_pagar}")

    print("\n=== Full JSON Response ===")
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
