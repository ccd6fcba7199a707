"""Adapters binding domain ports to concrete infrastructure."""
