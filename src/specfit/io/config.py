"""Configuration file loading and saving."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import ValidationError

from specfit.core.domain.config import SpecFitConfig
from specfit.core.shared.exceptions import ConfigError


def load_config(path: Path) -> SpecFitConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        SpecFitConfig: Validated configuration object.

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or does not
            match the configuration schema.
    """
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise ConfigError(msg)

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e

    try:
        return SpecFitConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {path}:\n{e}"
        raise ConfigError(msg) from e


def save_config(config: SpecFitConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Unset optional values are omitted, since TOML has no null.

    Args:
        config: Configuration object to save.
        path: Path where to save the TOML file.
    """
    data = config.model_dump(mode="json", exclude_none=True)

    with path.open("wb") as f:
        tomli_w.dump(data, f)


def generate_default_config() -> str:
    """Generate a default configuration file as a string.

    Returns:
        str: TOML-formatted default configuration.
    """
    return """# specfit Configuration File
# Generated automatically - edit as needed

[solver]
max_nfev = 5000
ftol = 1e-10
xtol = 1e-10
gtol = 1e-10

[baseline]
method = "arpls"  # als, arpls, snip
lam = 100000.0
p = 0.01          # ALS asymmetry
ratio = 1e-6      # arPLS stopping ratio
iterations = 40   # SNIP half-window
# max_iter = 50   # Uncomment to override the algorithm default

[peaks]
model = "lorentzian"  # lorentzian, gaussian, pseudo_voigt
baseline_order = 1
confidence = 0.95
# n_peaks = 2
# region = [1950.0, 2150.0]

[decay]
n_exp = 1
irf = true
confidence = 0.95
# irf_width = 0.2
# t_start = 0.0   # Only for irf = false

[logging]
# format = "json"  # text, json; inferred from the file suffix when unset
# file = "specfit.log"
"""


__all__ = ["generate_default_config", "load_config", "save_config"]
