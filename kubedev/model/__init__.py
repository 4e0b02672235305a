from .dev import Dev, read_dev

__all__ = ["Dev", "read_dev"]
