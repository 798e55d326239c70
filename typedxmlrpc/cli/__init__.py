"""Command-line interface for typedxmlrpc."""
