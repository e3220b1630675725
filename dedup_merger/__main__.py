"""Allow running as ``python -m dedup_merger``."""

from .cli import main

if __name__ == "__main__":
    main()
