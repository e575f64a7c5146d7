from .stats import RelayStats

__all__ = ["RelayStats"]
