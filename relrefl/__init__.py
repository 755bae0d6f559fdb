"""Relativistic reflection building blocks: Kerr physics, emissivity profiles, transfer function integration and returning radiation."""

__version__ = "0.1.0"