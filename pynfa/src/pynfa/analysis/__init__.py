"""Pure graph analyses over transition maps."""
