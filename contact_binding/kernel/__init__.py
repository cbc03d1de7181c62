"""Kernel utilities shared across the package.

Rules:
- Kernel code must not import from the binding or search packages.
- Keep it small and stable; no business logic here.
"""
