"""CHIP-8 instruction implementations, grouped by family."""
