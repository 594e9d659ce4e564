from .mount import MountStrategy
from .offline import OfflineStrategy

__all__ = [
    "MountStrategy",
    "OfflineStrategy",
]
