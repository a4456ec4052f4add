"""In-place image alteration driven by scenario attribute tables."""
