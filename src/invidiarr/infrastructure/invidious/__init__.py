from .client import InvidiousClient, normalize_instance

__all__ = ["InvidiousClient", "normalize_instance"]
