"""Application bootstrap helpers for the Vultan project."""

from .runtime import run_study
from .settings import AppSettings

__all__ = ["run_study", "AppSettings"]
