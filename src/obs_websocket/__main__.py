"""Entry point for python -m obs_websocket."""

from .cli import main

if __name__ == "__main__":
    main()
