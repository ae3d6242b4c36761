"""Collaborator interfaces consumed by the calculators."""

from grantlens.interfaces.catalog import PrivilegeCatalog, UnknownPrivilegeError

__all__ = [
    "PrivilegeCatalog",
    "UnknownPrivilegeError",
]
