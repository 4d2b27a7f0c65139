"""
Allow ``python -m proxydeck``
"""
from .adapters.cli.app import run

if __name__ == "__main__":
    run()
