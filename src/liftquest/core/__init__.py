"""Pure progression engines and domain models."""
