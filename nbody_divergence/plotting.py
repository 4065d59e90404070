import numpy as np
import matplotlib.pyplot as plt

from nbody_divergence.analysis import DEVIATION_COL, STEPS_COL


def plot_divergence_sample(df, bins: int = 100):
    """
    Scatter plot of starting deviation vs. retirement step, with marginals.

    Layout:
      - top:   histogram of starting deviations
      - main:  one point per retired world (deviation, steps)
      - right: histogram of retirement step counts

    Parameters
    ----------
    df : pandas.DataFrame
        Must contain 'deviation' and 'steps' columns.
    bins : int
        Number of bins of each marginal histogram.

    Returns
    -------
    fig : matplotlib.figure.Figure
        The generated figure (caller can plt.show() or fig.savefig()).
    """
    dev = df[DEVIATION_COL].to_numpy()
    steps = df[STEPS_COL].to_numpy()

    fig = plt.figure(figsize=(12, 12))
    grid = fig.add_gridspec(2, 2, width_ratios=(9, 1), height_ratios=(1, 9), wspace=0.05, hspace=0.05)

    ax_scatter = fig.add_subplot(grid[1, 0])
    ax_top = fig.add_subplot(grid[0, 0], sharex=ax_scatter)
    ax_right = fig.add_subplot(grid[1, 1], sharey=ax_scatter)

    # Main scatter (same axis margins as the data range +-10%)
    ax_scatter.scatter(dev, steps, s=4, color="green", alpha=0.6)
    ax_scatter.set_xlim(dev.min() * 0.9, dev.max() * 1.1)
    ax_scatter.set_ylim(steps.min() * 0.9, steps.max() * 1.1)
    ax_scatter.set_xlabel("Starting deviation")
    ax_scatter.set_ylabel("Steps until divergence")

    # Marginals
    ax_top.hist(dev, bins=bins, color="green", alpha=0.4)
    ax_top.tick_params(axis="x", labelbottom=False)
    ax_top.set_ylabel("count")

    ax_right.hist(steps, bins=bins, orientation="horizontal", color="green", alpha=0.4)
    ax_right.tick_params(axis="y", labelleft=False)
    ax_right.set_xlabel("count")

    return fig


def plot_scaling(centers, mean, var, mask, fit):
    """
    Binned mean divergence time vs. starting deviation, with the log fit.

    `centers`, `mean`, `var`, `mask` come from analysis.bin_by_deviation and
    `fit` from analysis.fit_divergence_scaling. Empty bins are not drawn.
    """
    fig, ax = plt.subplots(figsize=(9, 6))

    ax.errorbar(
        centers[mask],
        mean[mask],
        yerr=np.sqrt(var[mask]),
        fmt="o",
        color="green",
        ecolor="gray",
        capsize=3,
        label="binned mean +- std",
    )

    x = np.linspace(centers[mask].min(), centers[mask].max(), 200)
    x = x[x > 0]
    ax.plot(x, fit["slope"] * np.log(x) + fit["intercept"], color="black", label="time = a ln(dev) + b")

    ax.set_xlabel("Starting deviation")
    ax.set_ylabel("Time until divergence")
    ax.set_title(f"Divergence time scaling (lambda ~ {fit['lyapunov_exponent']:.3g})")
    ax.legend(loc="upper right", fontsize=8)

    plt.tight_layout()
    return fig
