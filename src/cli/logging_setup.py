"""Configuración de logs (loguru).

Los logs van siempre a stderr: stdout queda reservado para el reporte
(JSON/HTML/texto) y así se puede redirigir sin mezclarse.
"""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level="DEBUG" if verbose else level.upper(),
        colorize=None,
    )
