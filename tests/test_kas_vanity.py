import pytest

import vanity
from kas_vanity import build_parser, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("VANITY_PREFIX", "VANITY_SUFFIX"):
        monkeypatch.delenv(name, raising=False)


def test_no_pattern_exits_1(capsys):
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "--prefix or --suffix" in err
    assert "kas-vanity --prefix test" in err


@pytest.mark.parametrize("argv,char", [
    (["--prefix", "a1"], "1"),
    (["--prefix", "B"], "b"),
    (["--suffix", "xi"], "i"),
    (["--prefix", "qq", "--suffix", "o"], "o"),
])
def test_excluded_char_exits_1(argv, char, capsys):
    assert main(argv) == 1
    captured = capsys.readouterr()
    assert f"Invalid character '{char}'" in captured.err
    assert "qpzry9x8gf2tvdw0s3jn54khce6mua7l" in captured.err
    assert "KASPA VANITY" not in captured.out


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.scan_limit >= 1
    assert args.threads >= 1
    assert args.network in ("mainnet", "testnet", "simnet", "devnet")


@pytest.mark.parametrize("argv", [["--words", "18"], ["--scan-limit", "0"], ["--threads", "0"]])
def test_parser_rejects_out_of_domain(argv):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(argv)
    assert exc.value.code == 2


def test_match_report(capsys):
    assert main(["--prefix", "a", "--words", "12", "--scan-limit", "4", "--threads", "2"]) == 0
    out = capsys.readouterr().out
    assert "1 in 32 (approx)" in out
    assert "[MATCH FOUND]" in out
    assert "Address:    kaspa:" in out
    assert "Path Index:" in out
    assert "m/44'/111111'/0'/0/" in out
    assert "Time taken:" in out


def test_match_report_single_index_has_no_path(capsys):
    assert main(["--suffix", "q", "--scan-limit", "1", "--threads", "1"]) == 0
    out = capsys.readouterr().out
    assert "[MATCH FOUND]" in out
    assert "Path Index:" not in out


def test_entropy_failure_exits_1(monkeypatch, capsys):
    monkeypatch.setattr(vanity, "_random_entropy", lambda n: b"\x00")
    assert main(["--prefix", "a", "--threads", "1"]) == 1
    assert "FATAL" in capsys.readouterr().err


# ============================================================
# Environment defaults go through the same checks as flags
# ============================================================
@pytest.fixture
def reload_cli(monkeypatch):
    import importlib

    import kas_vanity

    def reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(kas_vanity)

    yield reload
    for name in ("SCAN_LIMIT", "WORD_COUNT", "NUM_WORKERS", "CASE_SENSITIVE", "NETWORK"):
        monkeypatch.delenv(name, raising=False)
    importlib.reload(kas_vanity)


@pytest.mark.parametrize("env,message", [
    ({"SCAN_LIMIT": "0"}, "--scan-limit"),
    ({"WORD_COUNT": "18"}, "must be 12 or 24"),
    ({"NUM_WORKERS": "0"}, "--threads"),
    ({"NETWORK": "nowhere"}, "unknown network"),
])
def test_bad_env_default_is_rejected_before_search(reload_cli, env, message, capsys):
    cli = reload_cli(**env)
    with pytest.raises(SystemExit) as exc:
        cli.main(["--prefix", "a"])
    assert exc.value.code == 2
    captured = capsys.readouterr()
    assert message in captured.err
    assert "KASPA VANITY" not in captured.out


def test_env_defaults_are_converted(reload_cli):
    cli = reload_cli(SCAN_LIMIT="7", WORD_COUNT="12", NUM_WORKERS="3", NETWORK="testnet")
    args = cli.build_parser().parse_args([])
    assert args.scan_limit == 7
    assert args.words == 12
    assert args.threads == 3
    assert args.network == "testnet"


def test_case_sensitive_env_can_be_switched_off(reload_cli):
    cli = reload_cli(CASE_SENSITIVE="true")
    parser = cli.build_parser()
    assert parser.parse_args([]).case_sensitive is True
    assert parser.parse_args(["--no-case-sensitive"]).case_sensitive is False
