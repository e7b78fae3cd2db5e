"""
Address composition: raw module address + version -> final address.

The scheduler calls the composer once per emitted module. Filters run
after version composition and may rewrite the address entirely.
"""

from __future__ import annotations

from typing import Callable, List, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from .types import Version

AddressFilter = Callable[[str, str], str]


def add_query_arg(address: str, name: str, value: str) -> str:
    """
    Append ``name=value`` to the query string of ``address``.

    An existing parameter with the same name is replaced; other
    parameters keep their original encoding and order.
    """
    parts = urlsplit(address)
    kept = [
        pair for pair in parts.query.split("&")
        if pair and pair.split("=", 1)[0] != name
    ]
    kept.append(f"{name}={quote(str(value), safe='.-_~')}")
    return urlunsplit(parts._replace(query="&".join(kept)))


class AddressComposer:
    """
    Default address composer.

    Args:
        ambient_version: Version used for modules registered with
            ``version=False``; None adds no suffix for those modules
        version_param: Query parameter carrying the version

    Example:
        composer = AddressComposer(ambient_version="6.9")
        composer.compose("app", "/app.js", False)   # "/app.js?ver=6.9"
        composer.compose("app", "/app.js", None)    # "/app.js"
        composer.compose("app", "/app.js?x=1", "2") # "/app.js?x=1&ver=2"
    """

    def __init__(
        self,
        ambient_version: Optional[str] = None,
        *,
        version_param: str = "ver",
    ):
        self.ambient_version = ambient_version
        self.version_param = version_param
        self._filters: List[AddressFilter] = []

    def add_filter(self, address_filter: AddressFilter) -> None:
        """
        Register a ``(address, module_id) -> address`` rewrite hook.

        Filters run in registration order.
        """
        self._filters.append(address_filter)

    def compose(self, module_id: str, raw_address: Optional[str], version: Version) -> str:
        """
        Build the final address of a module.

        Returns:
            The composed address, or "" when the module has none
        """
        address = raw_address or ""
        if address:
            if version is False:
                if self.ambient_version:
                    address = add_query_arg(address, self.version_param, self.ambient_version)
            elif version is not None and version is not True and version != "":
                address = add_query_arg(address, self.version_param, str(version))

        for address_filter in self._filters:
            address = address_filter(address, module_id)
            if not isinstance(address, str):
                address = ""

        return address

    def __call__(self, module_id: str, raw_address: Optional[str], version: Version) -> str:
        return self.compose(module_id, raw_address, version)
