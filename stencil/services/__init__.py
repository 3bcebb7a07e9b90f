"""External services used by Stencil."""
