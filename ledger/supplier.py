"""Supplier class for fuel entry references."""

from typing import Optional


class Supplier:
    """A fuel supplier attached to fuel entries."""

    def __init__(
        self,
        id: int,
        name: str,
        contact: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.contact = contact
        self.phone = phone
        self.address = address
