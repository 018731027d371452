"""MongoDB wire-compression benchmark."""

__version__ = "0.1.0"
