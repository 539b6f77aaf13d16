"""taskdn: plain-text tasks, projects and areas with lossless round trips."""

__version__ = "0.1.0"
