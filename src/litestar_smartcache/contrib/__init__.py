"""Optional store backends."""
