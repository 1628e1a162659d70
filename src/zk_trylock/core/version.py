"""Version information for zk-trylock."""

__version__ = "1.0.0"
