"""physlab.surrogate subpackage."""
