"""Service layer: vault operations built on parse, mutate, write cycles.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
