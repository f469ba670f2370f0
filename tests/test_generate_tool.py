import json
from pathlib import Path

from seedforge.cli.generate import _build_parser, main
from seedforge.content.io import load_spec_choices, load_spec_payload


def test_parser_requires_exactly_one_source() -> None:
    parser = _build_parser()

    args = parser.parse_args(["--genre", "card", "--chaos", "70", "--seed", "3"])

    assert args.genre == "card"
    assert args.chaos == 70
    assert args.seed == 3
    assert args.log_level == "WARNING"


def test_genre_defaults_with_fixed_seed(capsys) -> None:
    exit_code = main(["--genre", "action", "--seed", "42"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "seed_code=ACTN-JUMP-NORM-COLR000-0000018" in output
    assert "game_id=game_2a" in output
    assert "summary genre=action visual_style=pixel verbs=jump,collect" in output
    assert "spec_hash=" in output


def test_list_presets(capsys) -> None:
    exit_code = main(["--list-presets"])

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert len(lines) == 6
    assert "preset plumber_soul genre=action name=Soul of the Plumber" in lines


def test_unknown_preset_is_an_error(capsys) -> None:
    exit_code = main(["--preset", "space_plumber"])

    output = capsys.readouterr().out
    assert exit_code == 1
    assert output.startswith("error: unknown preset: space_plumber (known: ")


def test_chaos_override_and_validation_output(tmp_path: Path, capsys) -> None:
    out_path = tmp_path / "board.json"

    exit_code = main(
        ["--preset", "three_kingdoms", "--chaos", "250", "--seed", "9", "--print-validation", "--out", str(out_path)]
    )

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "chaos_level=100" in output
    assert "validation.meaningful_play valid=" in output
    assert "validation.difficulty valid=" in output
    assert f"wrote={out_path}" in output
    assert load_spec_choices(out_path).chaos_level == 100


def test_dna_answers_print_genes(tmp_path: Path, capsys) -> None:
    dna_path = tmp_path / "dna.json"
    dna_path.write_text(
        json.dumps(
            {
                "genre": "action",
                "answers": {"scene": "factory", "style": "charge", "rhythm": "fire"},
                "scene_description": "a clockwork heron",
                "chaos_level": 20,
            }
        ),
        encoding="utf-8",
    )
    out_path = tmp_path / "dna_spec.json"

    exit_code = main(["--dna", str(dna_path), "--seed", "77", "--out", str(out_path)])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert output.splitlines()[0] == "gene ⚙️ Giant rusted gears turning slowly"
    assert "summary genre=action visual_style=retro_crt verbs=jump,shoot" in output
    choices = load_spec_choices(out_path)
    assert choices.custom_element == "a clockwork heron"
    assert load_spec_payload(out_path)["spec"]["seed_code"].startswith("ACTN-JUMP-SHFT-SOND020-")


def test_existing_output_requires_force(tmp_path: Path, capsys) -> None:
    out_path = tmp_path / "spec.json"
    out_path.write_text("{}", encoding="utf-8")

    assert main(["--genre", "rhythm", "--seed", "1", "--out", str(out_path)]) == 1
    assert "output exists" in capsys.readouterr().out

    assert main(["--genre", "rhythm", "--seed", "1", "--out", str(out_path), "--force"]) == 0
    assert load_spec_payload(out_path)["spec"]["genre"] == "rhythm"


def test_choices_file_source(tmp_path: Path, capsys) -> None:
    choices_path = tmp_path / "choices.json"
    choices_path.write_text(
        json.dumps({"genre": "puzzle_logic", "visual_style": "minimal", "verbs": ["explore", "activate"]}),
        encoding="utf-8",
    )

    exit_code = main(["--choices", str(choices_path), "--seed", "4"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "seed_code=PUZL-XPLR-NORM-COLR000-0000004" in output
