"""Todo Groups backend: recurring task materialization over Firestore."""

__version__ = "0.1.0"
