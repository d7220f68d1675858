"""Modelos y entidades del dominio.

Aquí viven las estructuras de datos puras (Pydantic v2) y el vocabulario de
tipos schema.org. El dominio no conoce archivos, HTML ni CLI.
"""
