"""Token-keyed ephemeral store for short links and hosted files."""
