import numpy as np
import pandas as pd

# Canonical column names of a stored sample
DEVIATION_COL = "deviation"
STEPS_COL = "steps"
TIME_COL = "time"
ORDER_COL = "retire_order"


def datapoints_to_frame(datapoints, timestep: float) -> pd.DataFrame:
    """
    Convert a simulation output sample into a DataFrame.

    Columns: deviation (float64), steps (int64), time = steps * timestep
    (float64) and retire_order (int64, position in the output sample).
    """
    deviations = np.array([d for d, _ in datapoints], dtype=np.float64)
    steps = np.array([s for _, s in datapoints], dtype=np.int64)

    return pd.DataFrame(
        {
            DEVIATION_COL: deviations,
            STEPS_COL: steps,
            TIME_COL: steps.astype(np.float64) * timestep,
            ORDER_COL: np.arange(len(steps), dtype=np.int64),
        }
    )


def summarize_sample(df: pd.DataFrame) -> dict:
    """Headline numbers of a sample (count, deviation range, step/time stats)."""
    if len(df) == 0:
        raise ValueError("Cannot summarize an empty sample")

    return {
        "count": int(len(df)),
        "deviation_min": float(df[DEVIATION_COL].min()),
        "deviation_max": float(df[DEVIATION_COL].max()),
        "steps_mean": float(df[STEPS_COL].mean()),
        "steps_median": float(df[STEPS_COL].median()),
        "steps_std": float(df[STEPS_COL].std(ddof=0)),
        "time_mean": float(df[TIME_COL].mean()),
        "time_median": float(df[TIME_COL].median()),
    }


def bin_by_deviation(df: pd.DataFrame, num_bins: int):
    """
    Per-bin mean and variance of divergence time over equal-width deviation bins.

    Parameters
    ----------
    df : pandas.DataFrame
        Must contain the 'deviation' and 'time' columns.
    num_bins : int
        Number of bins spanning [min(deviation), max(deviation)].

    Returns
    -------
    centers : np.ndarray (num_bins,)
    mean    : np.ndarray (num_bins,)
    var     : np.ndarray (num_bins,)
    mask    : np.ndarray (num_bins,) of bool
        True where at least one sample fell into the bin.
    """
    for col in (DEVIATION_COL, TIME_COL):
        if col not in df.columns:
            raise KeyError(f"Expected a '{col}' column")

    dev = df[DEVIATION_COL].to_numpy()
    t = df[TIME_COL].to_numpy()

    lo, hi = float(dev.min()), float(dev.max())
    if hi <= lo:
        # All samples share one deviation: widen so histogram has a range
        lo, hi = lo - 0.5 * abs(lo) - 1e-12, hi + 0.5 * abs(hi) + 1e-12

    # 1) Basic histograms: counts, sum(values), sum(values^2)
    counts, edges = np.histogram(dev, bins=num_bins, range=(lo, hi))
    sum_vals, _ = np.histogram(dev, bins=num_bins, range=(lo, hi), weights=t)
    sum_sq, _ = np.histogram(dev, bins=num_bins, range=(lo, hi), weights=t ** 2)

    # 2) Avoid division by zero
    mask = counts > 0
    mean = np.zeros(num_bins, dtype=np.float64)
    var = np.zeros(num_bins, dtype=np.float64)

    # 3) Statistics
    mean[mask] = sum_vals[mask] / counts[mask]

    # Var = E[X^2] - (E[X])^2
    var[mask] = (sum_sq[mask] / counts[mask]) - (mean[mask] ** 2)

    # Numerical fix for tiny negative values due to floating point
    var[var < 0] = 0.0

    centers = 0.5 * (edges[:-1] + edges[1:])
    return centers, mean, var, mask


def fit_divergence_scaling(df: pd.DataFrame, divergence_ratio: float) -> dict:
    """
    Fit divergence time against the log of the starting deviation.

    For exponential separation, d(t) = d0 * exp(lambda * t), the retirement
    time is ln(divergence_ratio) / lambda. The least-squares line
    time = slope * ln(deviation) + intercept shows how strongly the time
    still depends on the perturbation size; `lyapunov_exponent` is the
    finite-time estimate ln(divergence_ratio) / mean(time).
    """
    if len(df) == 0:
        raise ValueError("Cannot fit an empty sample")

    log_dev = np.log(df[DEVIATION_COL].to_numpy())
    t = df[TIME_COL].to_numpy()

    if len(df) > 1 and np.ptp(log_dev) > 0:
        slope, intercept = np.polyfit(log_dev, t, 1)
    else:
        slope, intercept = 0.0, float(t.mean())

    mean_time = float(t.mean())
    exponent = float(np.log(divergence_ratio) / mean_time) if mean_time > 0 else float("nan")

    return {
        "slope": float(slope),
        "intercept": float(intercept),
        "lyapunov_exponent": exponent,
        "lyapunov_time": 1.0 / exponent if exponent > 0 else float("nan"),
    }
