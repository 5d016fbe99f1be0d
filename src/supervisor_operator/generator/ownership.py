"""
Owner reference construction and validation for managed secrets.

A managed secret belongs to exactly one OIDCProvider, recorded as a
controller owner reference. Ownership is decided by uid, kind and apiVersion,
never by name: a secret left behind by a deleted provider that is recreated
under the same name is not adopted.
"""

from kubernetes import client

from ..models import OIDCProvider


def new_controller_ref(parent: OIDCProvider) -> client.V1OwnerReference:
    """Build the controller owner reference pointing at ``parent``."""
    return client.V1OwnerReference(
        api_version=parent.api_version,
        kind=parent.kind,
        name=parent.metadata.name,
        uid=parent.metadata.uid,
        controller=True,
        block_owner_deletion=True,
    )


def get_controller_of(obj: client.V1Secret) -> client.V1OwnerReference | None:
    """Return the controller owner reference of ``obj``, if any."""
    metadata = getattr(obj, "metadata", None)
    for ref in getattr(metadata, "owner_references", None) or []:
        if getattr(ref, "controller", False):
            return ref
    return None


def is_controlled_by(obj: client.V1Secret, parent: OIDCProvider) -> bool:
    """Whether ``obj``'s controller reference identifies ``parent``."""
    ref = get_controller_of(obj)
    if ref is None:
        return False
    return (
        bool(parent.metadata.uid)
        and ref.uid == parent.metadata.uid
        and ref.kind == parent.kind
        and ref.api_version == parent.api_version
    )
