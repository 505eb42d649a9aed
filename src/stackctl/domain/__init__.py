"""Domain layer: records, manifests, and the error taxonomy.

This layer depends only on stdlib, pydantic, and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
