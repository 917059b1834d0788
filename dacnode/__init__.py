"""Building blocks of a data availability committee member: sequence signing, off-chain data serving and L1 synchronization."""

__version__ = "0.1.0"