"""podlogkeeper: captures the container log of every finished pod before the
cluster is allowed to delete it."""

__version__ = "0.1.0"
