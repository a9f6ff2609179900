"""
CLI layer - Typer commands and rich rendering.
"""
