"""Tests for the replay CLI."""

from pathlib import Path

import pytest
import torch

from scry.scripts.replay import build_parser, main


def _write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    config = tmp_path / "dump.yaml"
    config.write_text("dump_fields: [label, click]\ndump_param: [w]\n")
    batches = [
        {
            "line_ids": ["a", "b"],
            "vars": {
                "label": torch.tensor([[1], [0]], dtype=torch.int64),
                "click": {"data": torch.tensor([[5], [6], [7]], dtype=torch.int32), "lod": [0, 1, 3]},
                "w": torch.tensor([0.5]),
            },
        },
        {
            "line_ids": ["c"],
            "vars": {
                "label": torch.tensor([[1]], dtype=torch.int64),
                "w": torch.tensor([0.25]),
            },
        },
    ]
    batches_path = tmp_path / "batches.pt"
    torch.save(batches, batches_path)
    return config, batches_path


class TestReplayCli:

    def test_parser_requires_config_and_batches(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_writes_records_to_file(self, tmp_path: Path, capsys):
        config, batches = _write_inputs(tmp_path)
        out = tmp_path / "records.txt"

        assert main(["--config", str(config), "--batches", str(batches), "--dump-file", str(out)]) == 0

        assert out.read_text().splitlines() == [
            "a\tlabel:1:1\tclick:1:5",
            "b\tlabel:1:0\tclick:2:6:7",
            "(0,w):0.5",
            "c\tlabel:1:1",
            "(1,w):0.25",
        ]
        assert "wrote 5 records" in capsys.readouterr().out

    def test_mode_override(self, tmp_path: Path):
        config, batches = _write_inputs(tmp_path)
        out = tmp_path / "records.txt"

        main(["--config", str(config), "--batches", str(batches), "--dump-file", str(out), "--mode", "off"])

        assert out.read_text().splitlines() == ["(0,w):0.5", "(1,w):0.25"]

    def test_no_output_is_an_error(self, tmp_path: Path):
        config, batches = _write_inputs(tmp_path)
        with pytest.raises(SystemExit):
            main(["--config", str(config), "--batches", str(batches)])

    def test_large_batch_reaches_file_whole(self, tmp_path: Path, capsys):
        n = 12000  # more than the hub queue holds
        config = tmp_path / "dump.yaml"
        config.write_text("dump_fields: [label]\n")
        batches = tmp_path / "batches.pt"
        torch.save(
            [{"line_ids": [f"id{i}" for i in range(n)], "vars": {"label": torch.ones(n, 1, dtype=torch.int64)}}],
            batches,
        )
        out = tmp_path / "records.txt"

        main(["--config", str(config), "--batches", str(batches), "--dump-file", str(out)])

        lines = out.read_text().splitlines()
        assert len(lines) == n
        assert lines[-1] == f"id{n - 1}\tlabel:1:1"
        assert f"wrote {n} records" in capsys.readouterr().out

    def test_dump_dir(self, tmp_path: Path):
        config, batches = _write_inputs(tmp_path)

        main(["--config", str(config), "--batches", str(batches), "--dump-dir", str(tmp_path / "dumps")])

        (dump_dir,) = (tmp_path / "dumps").iterdir()
        assert len((dump_dir / "part-000").read_text().splitlines()) == 5
