import os

# ----------------------------
# Physics parameters
# ----------------------------
RADIUS = 0.1            # Exclusion radius: pairs closer than r_i + r_j exert no force
TIMESTEP = 1.0 / 2**21  # Fixed integration step (~4.77e-7)
GRAV_CONST = 1.0
DEFAULT_MASS = 50.0

# Number of kernel steps run between two divergence checks.
# The check cadence is PER_ITER * TIMESTEP (~4.9e-4 time units); it has not been
# validated against the measured divergence times and may need tuning.
PER_ITER = 1024

# A perturbed world is retired once its divergence from the reference reaches
# DIVERGENCE_RATIO times its starting deviation.
DIVERGENCE_RATIO = 2.0

# ----------------------------
# System Initial Conditions
# ----------------------------
# Positions of the bodies. Every body gets DEFAULT_MASS, zero velocity and RADIUS.
BODY_POSITIONS = [
    (1.0, 2.0, 3.0),
    (-1.0, 3.0, -2.0),
    (2.0, -3.0, 1.0),
    (-3.0, -2.0, 2.0),
    (-2.0, 1.0, -3.0),
    (0.0, 0.0, 0.0),
    (-4.0, 2.0, -3.0),
]

# ----------------------------
# Dataset generation parameters
# ----------------------------
NUM_INSTANCES = 8000        # Number of perturbed worlds
DISPLACEMENT_SCALE = 0.01   # Each displacement component is uniform in [0, DISPLACEMENT_SCALE)
OUTPUT_DIR = os.path.join("data", "raw")
OUTPUT_FILE = "datapoints.parquet"

# Reproducibility (set to None for non-deterministic runs)
SEED = None

# Print one line per retired world while simulating
VERBOSE = True

# ----------------------------
# Visualization parameters
# ----------------------------
HIST_BINS = 100      # Bins of the marginal histograms
SCALING_BINS = 20    # Deviation bins used for the scaling plot

# ----------------------------
# Sanity checks (fail fast)
# ----------------------------
assert RADIUS >= 0, "RADIUS must be a non-negative number"
assert TIMESTEP > 0, "TIMESTEP must be > 0"
assert GRAV_CONST > 0, "GRAV_CONST must be > 0"
assert DEFAULT_MASS > 0, "DEFAULT_MASS must be > 0"
assert isinstance(PER_ITER, int) and PER_ITER > 0, "PER_ITER must be a positive integer"
assert DIVERGENCE_RATIO > 1.0, "DIVERGENCE_RATIO must be > 1"
assert len(BODY_POSITIONS) > 0, "BODY_POSITIONS must not be empty"
assert all(len(p) == 3 for p in BODY_POSITIONS), "BODY_POSITIONS must hold 3-D points"
assert NUM_INSTANCES > 0, "NUM_INSTANCES must be > 0"
assert DISPLACEMENT_SCALE > 0, "DISPLACEMENT_SCALE must be > 0"
assert HIST_BINS > 0, "HIST_BINS must be > 0"
assert SCALING_BINS > 0, "SCALING_BINS must be > 0"
