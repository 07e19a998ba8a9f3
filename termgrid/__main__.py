"""Module entrypoint for ``python -m termgrid``.

All argument parsing happens in ``termgrid.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
