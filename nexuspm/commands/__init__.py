"""Command implementations behind the `nexuspm` CLI."""
