import os

import pandas as pd
import matplotlib.pyplot as plt

import nbody_divergence.config as cfg
from nbody_divergence.analysis import bin_by_deviation, fit_divergence_scaling, summarize_sample
from nbody_divergence.plotting import plot_divergence_sample, plot_scaling
from nbody_divergence.run_metadata import make_run_dir, write_run_artifacts


def main() -> None:
    data_path = os.path.join(cfg.OUTPUT_DIR, cfg.OUTPUT_FILE)

    print("--- STARTING VISUALIZATION ---")
    print(f"Reading data from: {data_path}")

    # 1) Load data
    try:
        df = pd.read_parquet(data_path, engine="pyarrow")
    except FileNotFoundError:
        print("Error: data file not found. Run main.py first.")
        return
    except ImportError:
        print("Error: missing dependency 'pyarrow'. Install it with: pip install pyarrow")
        return

    if len(df) == 0:
        print("Error: no rows found. Make sure main.py generated the sample.")
        return

    # 2) Statistics
    summary = summarize_sample(df)
    centers, mean, var, mask = bin_by_deviation(df, cfg.SCALING_BINS)
    fit = fit_divergence_scaling(df, cfg.DIVERGENCE_RATIO)

    print(f"Samples: {summary['count']} | mean time {summary['time_mean']:.4g}")
    print(f"Fit: time = {fit['slope']:.4g} * ln(dev) + {fit['intercept']:.4g}")
    print(f"Finite-time Lyapunov exponent: {fit['lyapunov_exponent']:.4g}")

    # 3) Plot
    print("Rendering plots...")
    fig_sample = plot_divergence_sample(df, bins=cfg.HIST_BINS)
    fig_scaling = plot_scaling(centers, mean, var, mask, fit)

    # 4) Save run artifacts (always)
    run_dir = make_run_dir(base_dir="outputs", prefix="vis")

    for name, fig in (("sample.png", fig_sample), ("scaling.png", fig_scaling)):
        fig_path = os.path.join(run_dir, name)
        fig.savefig(fig_path, dpi=200)
        print(f"Saved figure: {fig_path}")

    run_info = {
        "run_type": "visualization",
        "input_data": data_path,
        "summary": summary,
        "fit": fit,
        "simulation": {
            "timestep": cfg.TIMESTEP,
            "per_iter": cfg.PER_ITER,
            "grav_const": cfg.GRAV_CONST,
            "radius": cfg.RADIUS,
            "divergence_ratio": cfg.DIVERGENCE_RATIO,
        },
    }
    is_dirty = write_run_artifacts(run_dir, cfg, run_info)

    if is_dirty:
        print("WARNING: working tree has uncommitted changes.")
        print("         Commit hash may not fully describe the code used.")

    plt.show()


if __name__ == "__main__":
    main()
