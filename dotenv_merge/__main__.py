"""Entry point for running dotenv-merge as a module."""

from .cli import main

if __name__ == "__main__":
    main()
