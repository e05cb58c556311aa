"""inscribememaybe - bulk EVM inscription sender."""

__version__ = "0.1.0"
