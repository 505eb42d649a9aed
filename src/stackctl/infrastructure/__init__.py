"""Infrastructure layer: AWS adapters, workspace files, template rendering.

This layer depends on stdlib, third-party libs (boto3, Jinja2,
ruamel.yaml), and the domain layer. It must never import from services,
commands, or output at runtime; the service layer owns the contracts
these adapters satisfy.
"""
