"""Router inventory configuration."""
from .inventory import RouterInventory

__all__ = ["RouterInventory"]
