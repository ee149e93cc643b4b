"""XrayR node setup: provisioning wrapper for XrayR, GOST and host tuning."""

__version__ = "0.1.0"
