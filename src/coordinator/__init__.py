"""coordinator: content-addressed task store and profile registry behind JSON-RPC."""

__version__ = "0.1.0"
