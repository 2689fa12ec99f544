# services/permissions.py - Droits par rôle sur les ressources

from typing import Literal

PermissionResource = Literal["categories", "products", "clients", "quotes", "templates", "settings"]
PermissionAction = Literal["canCreate", "canRead", "canEdit", "canDelete", "canApprove", "canExport"]

ROLE_ADMIN = "Admin"
ROLE_DESIGNER = "Designer"
ROLE_CLIENT = "Client"


def has_permission(role: str, resource: PermissionResource, action: PermissionAction) -> bool:
    """
    Contrôle rapide des droits, sans aller-retour base.

    - Admin : tous les droits
    - Designer : tout sauf la suppression
    - Client : lecture et approbation uniquement
    """
    if role == ROLE_ADMIN:
        return True

    if role == ROLE_DESIGNER:
        return action != "canDelete"

    if role == ROLE_CLIENT:
        return action in ("canRead", "canApprove")

    return False
