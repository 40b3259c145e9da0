"""Components for cycle-level DRAM channel simulation with processing-in-memory units."""

__version__ = "0.1.0"