"""Adapters connecting the core to logging, storage, meters and the import system."""
