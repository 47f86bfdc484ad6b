"""Protocol interfaces for the lending client."""
from .chain import ChainClient

__all__ = ["ChainClient"]
