"""Tests for run reproducibility snapshots."""

import json
import os
import types

from nbody_divergence import config as cfg
from nbody_divergence.run_metadata import make_run_dir, snapshot_settings, write_run_artifacts
from nbody_divergence.simulation import SimulationParams


class TestSnapshotSettings:

    def test_keeps_only_upper_case_names(self):
        module = types.SimpleNamespace(PER_ITER=1024, helper=lambda: None, BODIES=[(1.0, 2.0, 3.0)])
        snap = snapshot_settings(module)
        assert snap == {"PER_ITER": 1024, "BODIES": [(1.0, 2.0, 3.0)]}

    def test_non_serializable_values_become_strings(self):
        module = types.SimpleNamespace(OBJ=object())
        assert isinstance(snapshot_settings(module)["OBJ"], str)

    def test_records_run_params(self):
        params = SimulationParams(per_iter=256, divergence_ratio=3.0)
        snap = snapshot_settings(cfg, params)
        assert snap["PER_ITER"] == cfg.PER_ITER
        assert snap["params"]["per_iter"] == 256
        assert snap["params"]["divergence_ratio"] == 3.0
        json.dumps(snap)

    def test_no_params_entry_without_params(self):
        assert "params" not in snapshot_settings(cfg)


class TestRunDirectory:

    def test_make_run_dir_with_prefix(self, tmp_path):
        run_dir = make_run_dir(base_dir=str(tmp_path), prefix="vis")
        assert os.path.isdir(run_dir)
        assert os.path.basename(run_dir).startswith("vis_")

    def test_write_run_artifacts(self, tmp_path):
        run_dir = make_run_dir(base_dir=str(tmp_path))
        params = SimulationParams(per_iter=512)
        is_dirty = write_run_artifacts(run_dir, cfg, {"run_type": "test"}, params=params)

        assert isinstance(is_dirty, bool)
        for name in (
            "git_commit.txt",
            "git_status_porcelain.txt",
            "pip_freeze.txt",
            "settings.json",
            "run_info.json",
        ):
            assert os.path.exists(os.path.join(run_dir, name)), f"Missing {name}"

        with open(os.path.join(run_dir, "run_info.json"), encoding="utf-8") as f:
            info = json.load(f)
        assert info["run_type"] == "test"
        assert info["output_dir"] == run_dir
        assert set(info["git"]) == {"commit", "is_dirty"}

        with open(os.path.join(run_dir, "settings.json"), encoding="utf-8") as f:
            settings = json.load(f)
        assert settings["params"]["per_iter"] == 512
