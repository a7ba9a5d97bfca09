"""M-of-N multisignature wallet: owners, thresholds and approved transactions."""

__version__ = "0.0.1"