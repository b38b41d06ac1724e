from .neighborlist import NeighborList

__all__ = ["NeighborList"]
