from .guides import GuidesRepository, StoreError
from . import models

__all__ = ["GuidesRepository", "StoreError", "models"]
