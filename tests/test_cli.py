import json
import logging
from typing import Any

import pytest
from click.testing import CliRunner

from errpack import cli as cli_mod
from errpack.core.click_factory import build_cli
from errpack.core.plugins import load_plugins


@pytest.fixture(scope="module")
def cli():
    load_plugins("errpack.plugins")
    return build_cli("errpack")


def _json(result: Any) -> dict[str, Any]:
    return json.loads(result.output.strip())


def test_plugins_register_verbs(cli) -> None:
    assert {"encode", "decode", "samples"} <= set(cli.commands)


def test_encode_json(cli) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "encode", "1234", "189", "3321"])

    assert result.exit_code == 0
    payload = _json(result)
    assert payload["ok"] is True
    (event,) = payload["events"]
    assert event["kind"] == "encode"
    assert event["message"] == "4D2.BD.CF9"
    assert event["code"] == "OK"
    assert event["details"] == {
        "code": 1294720249,
        "service": 1234,
        "category": 189,
        "subcode": 3321,
    }


def test_encode_accepts_hex_literals(cli) -> None:
    result = CliRunner().invoke(cli, ["encode", "0xFFF", "0xFF", "0xFFF"])

    assert result.exit_code == 0
    assert result.output.startswith("[encode] (OK:0) FFF.FF.FFF code=4294967295")


def test_encode_out_of_range_fails(cli) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "encode", "1234", "189", "4321"])

    assert result.exit_code == 1
    payload = _json(result)
    assert payload["ok"] is False
    (event,) = payload["events"]
    assert event["kind"] == "error"
    assert event["code"] == "E_INPUT_OUT_OF_RANGE"
    assert event["details"] == {"field": "subcode", "value": 4321, "maximum": 4095}


def test_encode_truncate_warns(cli) -> None:
    result = CliRunner().invoke(
        cli, ["--output", "json", "encode", "1234", "189", "4321", "--truncate"]
    )

    assert result.exit_code == 0
    payload = _json(result)
    assert payload["ok"] is True
    warning, encoded = payload["events"]
    assert warning["kind"] == "warning"
    assert warning["details"]["field"] == "subcode"
    assert encoded["message"] == "4D2.BD.0E1"


def test_encode_truncate_warns_for_every_field(cli) -> None:
    result = CliRunner().invoke(
        cli, ["--output", "json", "encode", "5000", "300", "5000", "--truncate"]
    )

    assert result.exit_code == 0
    *warnings, encoded = _json(result)["events"]
    assert [w["kind"] for w in warnings] == ["warning"] * 3
    assert [w["details"]["field"] for w in warnings] == ["service", "category", "subcode"]
    assert warnings[1]["message"] == "category=300 truncated to 44"
    assert encoded["message"] == "388.2C.388"


def test_encode_accepts_zero_padded_decimals(cli) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "encode", "010", "007", "0099"])

    assert result.exit_code == 0
    (event,) = _json(result)["events"]
    assert event["message"] == "00A.07.063"
    assert event["details"]["service"] == 10


def test_encode_rejects_non_integer(cli) -> None:
    result = CliRunner().invoke(cli, ["encode", "abc", "1", "1"])

    assert result.exit_code == 2


@pytest.mark.parametrize(
    "code", ["4D2.BD.CF9", "4d2.bd.cf9", "1294720249", "01294720249", "0x4D2BDCF9"]
)
def test_decode_forms(cli, code: str) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "decode", code])

    assert result.exit_code == 0
    (event,) = _json(result)["events"]
    assert event["message"] == "4D2.BD.CF9"
    assert event["details"] == {
        "code": 1294720249,
        "service": 1234,
        "category": 189,
        "subcode": 3321,
    }


@pytest.mark.parametrize(
    "code, status",
    [
        ("ZZZ.GG.000", "E_INPUT_MALFORMED"),
        ("12.34", "E_INPUT_MALFORMED"),
        ("nonsense", "E_INPUT_MALFORMED"),
        ("4294967296", "E_INPUT_OUT_OF_RANGE"),
    ],
)
def test_decode_bad_input(cli, code: str, status: str) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "decode", code])

    assert result.exit_code == 1
    payload = _json(result)
    assert payload["ok"] is False
    assert payload["events"][0]["code"] == status


def test_decode_text_output(cli) -> None:
    result = CliRunner().invoke(cli, ["decode", "001.45.083"])

    assert result.exit_code == 0
    assert result.output.strip() == (
        "[decode] (OK:0) 001.45.083 code=1331331 service=1 category=69 subcode=131"
    )


def test_samples_follow_grid_order(cli) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "samples", "--limit", "10"])

    assert result.exit_code == 0
    messages = [ev["message"] for ev in _json(result)["events"]]
    assert messages == [
        "000.00.000",
        "000.1E.000",
        "000.3C.000",
        "000.5A.000",
        "000.78.000",
        "000.96.000",
        "000.B4.000",
        "000.D2.000",
        "000.F0.000",
        "000.00.059",
    ]


def test_samples_custom_steps(cli) -> None:
    result = CliRunner().invoke(
        cli,
        [
            "--output",
            "json",
            "samples",
            "--service-step",
            "4095",
            "--subcode-step",
            "4095",
            "--category-step",
            "255",
        ],
    )

    assert result.exit_code == 0
    messages = [ev["message"] for ev in _json(result)["events"]]
    assert len(messages) == 8
    assert messages[0] == "000.00.000"
    assert messages[-1] == "FFF.FF.FFF"


def test_samples_rejects_zero_step(cli) -> None:
    result = CliRunner().invoke(cli, ["--output", "json", "samples", "--service-step", "0"])

    assert result.exit_code == 1
    assert _json(result)["events"][0]["code"] == "E_INPUT_OUT_OF_RANGE"


def test_quiet_suppresses_output(cli) -> None:
    result = CliRunner().invoke(cli, ["--quiet", "encode", "1", "2", "3"])

    assert result.exit_code == 0
    assert result.output == ""


def test_output_from_environment(cli) -> None:
    result = CliRunner().invoke(
        cli, ["decode", "001.45.083"], env={"ERRPACK_OUTPUT": "json"}, auto_envvar_prefix="ERRPACK"
    )

    assert result.exit_code == 0
    assert _json(result)["ok"] is True


def test_usage_error_returns_two(cli) -> None:
    result = CliRunner().invoke(cli, ["encode"])

    assert result.exit_code == 2


def test_main_returns_exit_codes(capsys) -> None:
    assert cli_mod.main(["encode", "1", "2", "3"]) == 0
    assert cli_mod.main(["decode", "ZZZ.GG.000"]) == 1
    assert cli_mod.main(["decode"]) == 2
    captured = capsys.readouterr()
    assert "[encode] (OK:0) 001.02.003" in captured.out
    assert "E_INPUT_MALFORMED" in captured.out


def test_run_returns_results() -> None:
    results, code = cli_mod.run(["--quiet", "decode", "FFF.FF.FFF"])

    assert code == 0
    assert results.ok is True
    assert results.events[0]["details"]["code"] == 0xFFFFFFFF


def test_run_keeps_root_logger_handlers() -> None:
    root = logging.getLogger()
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        cli_mod.run(["--quiet", "encode", "1", "2", "3"])
        cli_mod.run(["--quiet", "--log-level", "debug", "encode", "1", "2", "3"])
        assert handler in root.handlers
    finally:
        root.removeHandler(handler)
        logging.getLogger("errpack").setLevel(logging.NOTSET)


def test_log_level_sets_package_logger() -> None:
    pkg_logger = logging.getLogger("errpack")
    root_level = logging.getLogger().level
    try:
        cli_mod.run(["--quiet", "encode", "1", "2", "3"])
        assert pkg_logger.level == logging.NOTSET

        cli_mod.run(["--quiet", "--log-level", "INFO", "encode", "1", "2", "3"])
        assert pkg_logger.level == logging.INFO
        assert logging.getLogger().level == root_level
    finally:
        pkg_logger.setLevel(logging.NOTSET)
