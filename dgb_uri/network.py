"""Network identity parameters for DigiByte chains.

Parameters are plain immutable values constructed up front and passed to the
parser and address resolvers explicitly; nothing here is initialised lazily or
mutated after import.
"""

from __future__ import annotations

from dataclasses import dataclass

URI_SCHEME = "digibyte"


@dataclass(frozen=True)
class NetworkParameters:
    """Address rules and URI scheme for one DigiByte network."""

    id: str
    name: str
    address_header: int
    p2sh_header: int
    acceptable_address_codes: tuple[int, ...]
    uri_scheme: str = URI_SCHEME

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkParameters):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def accepts_version(self, version: int) -> bool:
        return version in self.acceptable_address_codes


MAINNET = NetworkParameters(
    id="org.digibyte.production",
    name="mainnet",
    address_header=30,
    p2sh_header=63,
    # Version 5 is the legacy P2SH prefix still accepted by DigiByte Core.
    acceptable_address_codes=(30, 63, 5),
)

TESTNET = NetworkParameters(
    id="org.digibyte.test",
    name="testnet",
    address_header=126,
    p2sh_header=140,
    acceptable_address_codes=(126, 140),
)

_NETWORKS: dict[str, NetworkParameters] = {
    network.name: network for network in (MAINNET, TESTNET)
}


def network_from_id(network_id: str) -> NetworkParameters | None:
    """Return the parameters registered under ``network_id`` or ``None``."""

    for network in _NETWORKS.values():
        if network.id == network_id:
            return network
    return None


def network_from_name(name: str) -> NetworkParameters:
    """Return the parameters for ``name`` (``mainnet``/``testnet``).

    Raises :class:`KeyError` for unknown names.
    """

    normalized = name.strip().lower()
    if normalized in {"main", "prod", "production"}:
        normalized = "mainnet"
    elif normalized in {"test"}:
        normalized = "testnet"
    try:
        return _NETWORKS[normalized]
    except KeyError:
        raise KeyError(f"Unknown DigiByte network: {name}") from None


def available_networks() -> list[str]:
    return sorted(_NETWORKS)
