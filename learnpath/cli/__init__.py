"""Inspection CLI."""

from learnpath.cli.report import app


def main() -> None:
    app()


__all__ = ["app", "main"]
