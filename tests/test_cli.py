import json
from types import SimpleNamespace

import pytest

from dgb_uri import cli
from dgb_uri.address import encode_address
from dgb_uri.config import set_default_config_path
from dgb_uri.network import MAINNET

GOOD_ADDRESS = encode_address(MAINNET, bytes(range(20)))


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr("dgb_uri.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")
    monkeypatch.delenv("DGB_NETWORK", raising=False)
    yield
    set_default_config_path(None)


def test_parse_prints_request_json(capsys) -> None:
    cli.main(["parse", f"digibyte:{GOOD_ADDRESS}?amount=1.5&label=Caf%C3%A9&x=1"])

    output = json.loads(capsys.readouterr().out)
    assert output["address"] == GOOD_ADDRESS
    assert output["network"] == "mainnet"
    assert output["amount_units"] == 150000000
    assert output["amount"] == "1.5"
    assert output["label"] == "Café"
    assert output["extra_parameters"] == {"x": "1"}


def test_parse_failure_exits_non_zero(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["parse", f"digibyte:{GOOD_ADDRESS}?req-aardvark=1"])

    assert excinfo.value.code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["error"] == "unrecognized_required_field"
    assert output["field"] == "req-aardvark"


def test_parse_with_node_check(monkeypatch, capsys) -> None:
    rpc = SimpleNamespace(
        getblockchaininfo=lambda: {"chain": "main"},
        validateaddress=lambda address: {"isvalid": True},
    )
    monkeypatch.setattr(cli, "load_rpc_config", lambda: None)
    monkeypatch.setattr(cli, "DigiByteRPCClient", lambda config: rpc)

    cli.main(["parse", "--node-check", f"digibyte:{GOOD_ADDRESS}"])

    assert json.loads(capsys.readouterr().out)["address"] == GOOD_ADDRESS


def test_node_check_refuses_wrong_chain(monkeypatch, capsys) -> None:
    rpc = SimpleNamespace(getblockchaininfo=lambda: {"chain": "test"})
    monkeypatch.setattr(cli, "load_rpc_config", lambda: None)
    monkeypatch.setattr(cli, "DigiByteRPCClient", lambda config: rpc)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["parse", "--node-check", f"digibyte:{GOOD_ADDRESS}"])

    assert excinfo.value.code == 1
    assert "chain 'test'" in capsys.readouterr().err


def test_node_check_reports_missing_blockchain_info(monkeypatch, capsys) -> None:
    rpc = SimpleNamespace(getblockchaininfo=lambda: None)
    monkeypatch.setattr(cli, "load_rpc_config", lambda: None)
    monkeypatch.setattr(cli, "DigiByteRPCClient", lambda config: rpc)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["parse", "--node-check", f"digibyte:{GOOD_ADDRESS}"])

    assert excinfo.value.code == 1
    assert "no blockchain info" in capsys.readouterr().err


def test_build_prints_canonical_uri(capsys) -> None:
    cli.main(
        [
            "build",
            GOOD_ADDRESS,
            "--amount",
            "12.340",
            "--label",
            "Hello World",
            "--message",
            "Mess & age + hope",
            "--param",
            "invoice=42",
        ]
    )

    assert capsys.readouterr().out.strip() == (
        f"digibyte:{GOOD_ADDRESS}?amount=12.34&label=Hello%20World"
        "&message=Mess%20%26%20age%20%2B%20hope&invoice=42"
    )


def test_build_rejects_bad_param(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["build", GOOD_ADDRESS, "--param", "novalue"])

    assert excinfo.value.code == 1
    assert "KEY=VALUE" in capsys.readouterr().err


def test_build_rejects_negative_amount(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["build", GOOD_ADDRESS, "--amount", "-1"])

    assert "Amount must be positive" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("style", "expected"),
    [("friendly", "1.00"), ("plain", "1")],
)
def test_format_styles(capsys, style: str, expected: str) -> None:
    cli.main(["format", "100000000", "--style", style])
    assert capsys.readouterr().out.strip() == expected


def test_to_units(capsys) -> None:
    cli.main(["to-units", "1E-2"])
    assert capsys.readouterr().out.strip() == "1000000"


def test_to_units_rejects_excess_precision(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["to-units", "2E-20"])

    assert excinfo.value.code == 1
    assert "fractional digits" in capsys.readouterr().err


def test_network_option_selects_testnet(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--network", "testnet", "parse", f"digibyte:{GOOD_ADDRESS}"])

    assert json.loads(capsys.readouterr().out)["error"] == "bad_address"
