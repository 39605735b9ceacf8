"""Entry point for ``python -m remote_templates``."""
from .cli import app

if __name__ == "__main__":
    app()
