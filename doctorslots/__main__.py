"""
Entry point for ``python -m doctorslots``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
