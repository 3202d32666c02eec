"""
Entry point for ``python -m pawn_context``.
"""

from pawn_context.cli import main


if __name__ == "__main__":
    main()
