"""JaivaLens - scope-aware symbol index for Jaiva editor tooling."""

__version__ = "0.1.0"
