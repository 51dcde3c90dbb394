"""physlab.utils subpackage."""
