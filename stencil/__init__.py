"""Stencil - create and update project folders from template repositories."""

__version__ = "0.1.0"
