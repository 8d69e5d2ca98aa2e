from app.domains.identity.entities import Identity

__all__ = ["Identity"]
