"""Protocol interfaces for suidouble."""
from .chain import RemoteDataSource
from .signer import Signer

__all__ = ["RemoteDataSource", "Signer"]
