"""Core constants for specfit optimization and baseline estimation.

These constants define default parameters for the solver and the baseline
algorithms. They can be overridden via configuration files, CLI arguments or
explicit keyword arguments.
"""

# =============================================================================
# Least-Squares Optimization Defaults
# =============================================================================

LEAST_SQUARES_FTOL = 1e-10  # Function tolerance for convergence
"""Default function tolerance for least-squares optimization.

The optimization terminates when the relative change in cost function
is less than this value.
"""

LEAST_SQUARES_XTOL = 1e-10  # Parameter tolerance for convergence
"""Default parameter tolerance for least-squares optimization.

The optimization terminates when the relative change in parameter
values is less than this value.
"""

LEAST_SQUARES_GTOL = 1e-10  # Gradient tolerance for convergence

LEAST_SQUARES_MAX_NFEV = 5000  # Maximum function evaluations
"""Maximum number of function evaluations for least-squares optimization.

Bounds the worst-case runtime of every fit call.
"""

ILL_CONDITIONED_LIMIT = 1e14
"""Condition number of JᵗJ above which the covariance is reported as NaN."""

DEFAULT_CONFIDENCE = 0.95  # Two-sided confidence level for reported intervals

# =============================================================================
# Baseline Defaults
# =============================================================================

ALS_LAMBDA = 1e5  # Smoothness (typical 1e4-1e8)
ALS_P = 0.01  # Asymmetry (typical 0.001-0.05)
ALS_MAX_ITER = 10

ARPLS_LAMBDA = 1e5
ARPLS_MAX_ITER = 50
ARPLS_RATIO = 1e-6  # Relative weight change that stops the reweighting

SNIP_ITERATIONS = 40  # Largest clipping half-window, in points

# =============================================================================
# Peak Fitting Defaults
# =============================================================================

DEFAULT_PEAK_MODEL = "lorentzian"
DEFAULT_BASELINE_ORDER = 1
EDGE_FRACTION = 0.05  # Fraction of the region used on each side for baseline guesses
MIN_EDGE_POINTS = 3
WIDTH_GUESS_FRACTION = 0.1  # Default FWHM guess as a fraction of the region span

# =============================================================================
# Decay Fitting Defaults
# =============================================================================

TAU_GRID_POINTS = 16  # Grid size for the initial tau search
TAU_GRID_MAX_EXP = 3  # Above this many components, taus are seeded without a grid
