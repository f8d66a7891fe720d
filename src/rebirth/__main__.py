"""Entry point for running the supervisor via `python -m rebirth`."""

from .cli.main import main_cli

if __name__ == "__main__":
    main_cli()
