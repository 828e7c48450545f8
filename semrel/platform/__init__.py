"""Platform adapters: subprocess execution and CI detection."""

from semrel.platform.ci import CiEnvironment, CiProvider, detect_ci
from semrel.platform.process import ProcessError, run

__all__ = [
    "CiEnvironment",
    "CiProvider",
    "ProcessError",
    "detect_ci",
    "run",
]
