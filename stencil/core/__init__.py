"""Core Stencil engine: scan, plan and apply template trees."""
