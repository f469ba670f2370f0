from seedforge.cli.chaos_sim import _build_parser, main


def test_parser_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.level is None
    assert args.preset is None
    assert args.seed == 0
    assert args.duration_ms == 300_000


def test_order_preset_never_activates(capsys) -> None:
    exit_code = main(["--preset", "order"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "header level=0 preset=order frequency_ms=- max_active=0 categories=- eligible=0" in output
    assert "summary activations=0 max_active_observed=0 active_at_end=- torn_down=-" in output


def test_level_run_prints_trace_and_is_repeatable(capsys) -> None:
    assert main(["--level", "50", "--seed", "12", "--builtin-only"]) == 0
    first = capsys.readouterr().out
    assert main(["--level", "50", "--seed", "12", "--builtin-only"]) == 0
    second = capsys.readouterr().out

    assert first == second
    assert "header level=50 preset=emergent frequency_ms=60000 max_active=2" in first
    assert "trace time_ms=60000 event=activated" in first
    assert "summary activations=5" in first


def test_steps_and_no_teardown(capsys) -> None:
    exit_code = main(["--level", "20", "--duration-ms", "100000", "--step-ms", "50000", "--no-teardown"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "step time_ms=50000 active=-" in output
    assert "step time_ms=100000 active=" in output
    assert "torn_down=-" in output
    assert "event=deactivated" not in output


def test_bad_catalog_directory_entry_is_reported(tmp_path, capsys) -> None:
    (tmp_path / "broken.json").write_text('{"schema_version": 3, "mutations": []}', encoding="utf-8")

    exit_code = main(["--catalog-dir", str(tmp_path)])

    output = capsys.readouterr().out
    assert exit_code == 1
    assert "error: broken.json: unsupported mutation catalog schema_version: 3" in output
