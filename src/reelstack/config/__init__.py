"""Configuration package for ReelStack."""

from pathlib import Path

CONFIG_ROOT = Path(__file__).resolve().parent

__all__ = ["CONFIG_ROOT"]
