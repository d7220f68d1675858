"""Ejecuta `schemasentry` desde un checkout sin instalar.

Uso: `python main.py validate --manifest schema-sentry.manifest.json --root out`

El paquete vive bajo `src/`; sin `pip install -e .` hay que añadirlo al path.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
