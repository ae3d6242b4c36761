from .memory import InMemoryPrivilegeCatalog
from .models import PrivilegeDefinitionSet

__all__ = [
    "InMemoryPrivilegeCatalog",
    "PrivilegeDefinitionSet",
]
