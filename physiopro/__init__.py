"""PhysioPro: exercise-prescription platform backend."""

__version__ = "0.1.0"
