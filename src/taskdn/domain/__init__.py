"""Domain layer: value types, document models, parsing, writing and filters.

This layer depends only on stdlib, pydantic and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
