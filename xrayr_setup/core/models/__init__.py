"""
Domain models: Pydantic types for the installer.

All models are re-exported here for convenient access:

    from xrayr_setup.core.models import HostProfile, OSFamily, Receipt, Settings
"""

from xrayr_setup.core.models.action import FailurePolicy, Receipt
from xrayr_setup.core.models.host import HostProfile, OSFamily
from xrayr_setup.core.models.settings import BenchmarkMode, Paths, Settings, Urls

__all__ = [
    "BenchmarkMode",
    "FailurePolicy",
    "HostProfile",
    "OSFamily",
    "Paths",
    "Receipt",
    "Settings",
    "Urls",
]
