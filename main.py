import os

import nbody_divergence.config as cfg
from nbody_divergence.analysis import datapoints_to_frame, summarize_sample
from nbody_divergence.perturbations import make_uniform_perturbations
from nbody_divergence.run_metadata import make_run_dir, write_run_artifacts
from nbody_divergence.simulation import SimulationParams, run_simulations
from nbody_divergence.worlds import default_starting_conditions


def main() -> None:
    """
    Entry point for the divergence dataset pipeline.

    Pipeline:
      1) Build the reference system from config and NUM_INSTANCES random
         perturbation generators
      2) Evolve all worlds until every perturbed world has diverged
      3) Save the (deviation, steps) sample as a Parquet file

    Output file:
      - OUTPUT_DIR/OUTPUT_FILE
      - Columns: deviation (float64), steps (int64), time (float64), retire_order (int64)
    """
    params = SimulationParams(
        timestep=cfg.TIMESTEP,
        grav_const=cfg.GRAV_CONST,
        per_iter=cfg.PER_ITER,
        divergence_ratio=cfg.DIVERGENCE_RATIO,
    )

    os.makedirs(cfg.OUTPUT_DIR, exist_ok=True)

    starting_conditions = default_starting_conditions()

    print("--- STARTING SIMULATION ---")
    print(f"Bodies: {len(starting_conditions)} | Perturbed worlds: {cfg.NUM_INSTANCES}")
    print(f"Displacement scale: {cfg.DISPLACEMENT_SCALE} | Seed: {cfg.SEED}")
    print(f"Timestep: {params.timestep:.3e} | Steps per check: {params.per_iter}")

    # Reproducible displacements when cfg.SEED is provided; otherwise uses system entropy.
    instances = make_uniform_perturbations(cfg.NUM_INSTANCES, cfg.DISPLACEMENT_SCALE, cfg.SEED)

    datapoints = run_simulations(starting_conditions, instances, params=params, verbose=cfg.VERBOSE)

    df = datapoints_to_frame(datapoints, params.timestep)
    summary = summarize_sample(df)

    print(
        f"Retired {summary['count']} worlds | "
        f"deviation [{summary['deviation_min']:.5f}, {summary['deviation_max']:.5f}] | "
        f"steps mean {summary['steps_mean']:.0f}, median {summary['steps_median']:.0f}"
    )

    file_path = os.path.join(cfg.OUTPUT_DIR, cfg.OUTPUT_FILE)
    try:
        df.to_parquet(file_path, engine="pyarrow", compression="snappy")
    except ImportError as e:
        raise ImportError(
            "Failed to save Parquet file. Please install 'pyarrow' (pip install pyarrow)."
        ) from e

    print(f"Saved: {file_path}")

    run_dir = make_run_dir(base_dir="outputs", prefix="sim")
    run_info = {
        "run_type": "simulation",
        "output_file": file_path,
        "num_bodies": len(starting_conditions),
        "summary": summary,
    }
    if write_run_artifacts(run_dir, cfg, run_info, params=params):
        print("WARNING: working tree has uncommitted changes.")
    print(f"Run metadata: {run_dir}")
    print("--- FINISHED ---")


if __name__ == "__main__":
    main()
