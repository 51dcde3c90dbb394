"""physlab.data subpackage."""
