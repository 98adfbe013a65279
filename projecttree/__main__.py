"""Module entrypoint for ``python -m projecttree``.

All argument parsing and runtime setup happen in ``projecttree.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
