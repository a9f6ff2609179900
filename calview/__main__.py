"""
Convenience entry point for running calview as a module.

Usage: python -m calview [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
