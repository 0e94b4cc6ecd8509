"""JaivaLens CLI - jvl command."""
