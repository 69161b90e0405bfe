"""Allow running with python -m fastfood_server."""

from .cli import main

main()
