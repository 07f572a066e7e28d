
"""Module entrypoint for `python -m textproto_validator`.

Delegates to the validator CLI implementation.
"""

from .run_validate import main


if __name__ == "__main__":
    main()
