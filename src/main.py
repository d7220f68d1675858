"""Entrypoint `python -m main` cuando `src/` ya está en el path.

Nota: los reportes usan emojis (✅ ❌ 👻); en consolas Windows con cp1252 hay
que forzar UTF-8 antes de importar Rich.
"""

from __future__ import annotations

import sys

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run  # noqa: E402

if __name__ == "__main__":
    run()
