from .settings import Settings  # noqa

__all__ = ["Settings"]
