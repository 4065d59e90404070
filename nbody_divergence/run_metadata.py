"""
Reproducibility snapshots.

Every saved figure or dataset gets a sibling run directory holding the git
state, the installed packages, the config module and the SimulationParams
the run actually used.
"""

import dataclasses
import json
import os
import subprocess
import sys
from datetime import datetime
from typing import Any, Dict, Optional

UNKNOWN = "unknown"


def _capture(*cmd: str) -> str:
    # Missing git/pip or a non-repository directory is recorded, not raised
    try:
        return subprocess.check_output(cmd, stderr=subprocess.STDOUT, text=True).strip()
    except (OSError, subprocess.CalledProcessError):
        return UNKNOWN


def _dump_json(path: str, obj: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True)


def snapshot_settings(cfg_module, params=None) -> Dict[str, Any]:
    """
    JSON-ready view of the run settings.

    ALL_CAPS names of `cfg_module` are copied (values json cannot encode are
    stored as their str()). When `params` is given, the SimulationParams used
    by the run are stored under "params"; they can differ from the config
    defaults.
    """
    snap: Dict[str, Any] = {}
    for name, value in vars(cfg_module).items():
        if not name.isupper():
            continue
        try:
            json.dumps(value)
        except TypeError:
            value = str(value)
        snap[name] = value

    if params is not None:
        snap["params"] = dataclasses.asdict(params)
    return snap


def make_run_dir(base_dir: str = "outputs", prefix: Optional[str] = None) -> str:
    """Create and return `base_dir/[prefix_]YYYY-mm-dd_HH-MM-SS`."""
    stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir = os.path.join(base_dir, f"{prefix}_{stamp}" if prefix else stamp)
    os.makedirs(run_dir, exist_ok=True)
    return run_dir


def write_run_artifacts(run_dir: str, cfg_module, run_info: Dict[str, Any], params=None) -> bool:
    """
    Write the reproducibility snapshot of a run into `run_dir`.

    Files: git_commit.txt, git_status_porcelain.txt, pip_freeze.txt,
    settings.json (see snapshot_settings) and run_info.json (`run_info` plus
    the run directory and a "git" entry).

    Returns True when the working tree has uncommitted changes, i.e. the
    commit hash alone does not describe the code that produced the run.
    """
    commit = _capture("git", "rev-parse", "HEAD")
    status = _capture("git", "status", "--porcelain")
    is_dirty = bool(status and status != UNKNOWN)

    texts = {
        "git_commit.txt": commit,
        "git_status_porcelain.txt": status,
        "pip_freeze.txt": _capture(sys.executable, "-m", "pip", "freeze"),
    }
    for name, content in texts.items():
        with open(os.path.join(run_dir, name), "w", encoding="utf-8") as f:
            f.write(content + "\n")

    _dump_json(os.path.join(run_dir, "settings.json"), snapshot_settings(cfg_module, params))

    info = dict(run_info)
    info["output_dir"] = run_dir
    info["git"] = {"commit": commit, "is_dirty": is_dirty}
    _dump_json(os.path.join(run_dir, "run_info.json"), info)

    return is_dirty
