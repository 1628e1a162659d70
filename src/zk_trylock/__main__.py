"""Allow ``python -m zk_trylock``."""

from zk_trylock.cli.main import main

if __name__ == "__main__":
    main()
