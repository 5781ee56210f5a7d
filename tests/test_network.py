import dataclasses

import pytest

from dgb_uri.network import (
    MAINNET,
    TESTNET,
    available_networks,
    network_from_id,
    network_from_name,
)


def test_lookup_by_id() -> None:
    assert network_from_id("org.digibyte.production") is MAINNET
    assert network_from_id("org.digibyte.test") is TESTNET
    assert network_from_id("org.litecoin.production") is None


@pytest.mark.parametrize(
    ("name", "expected"),
    [("mainnet", MAINNET), ("MAIN", MAINNET), ("production", MAINNET), ("test", TESTNET)],
)
def test_lookup_by_name(name, expected) -> None:
    assert network_from_name(name) is expected


def test_unknown_name_raises_key_error() -> None:
    with pytest.raises(KeyError):
        network_from_name("regtest")


def test_parameters_are_immutable_and_compare_by_id() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        MAINNET.address_header = 0  # type: ignore[misc]
    clone = dataclasses.replace(MAINNET, name="renamed")
    assert clone == MAINNET
    assert hash(clone) == hash(MAINNET)
    assert MAINNET != TESTNET


def test_both_networks_share_the_digibyte_scheme() -> None:
    assert MAINNET.uri_scheme == TESTNET.uri_scheme == "digibyte"
    assert available_networks() == ["mainnet", "testnet"]
    assert MAINNET.accepts_version(30)
    assert not MAINNET.accepts_version(126)
