from .gateway import MarketplaceClient, SessionStore

__all__ = ["MarketplaceClient", "SessionStore"]
