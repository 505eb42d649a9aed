"""stackctl: provision and describe containerized applications on AWS."""

__version__ = "0.1.0"
