"""Command-line interface for ibmcloud-resources."""

from .main import cli, main

__all__ = ["cli", "main"]
