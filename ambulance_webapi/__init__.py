"""HTTP API for managing ambulance waiting lists stored in MongoDB."""

__version__ = "1.0.0"