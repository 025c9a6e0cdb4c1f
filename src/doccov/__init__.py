"""doccov — documentation coverage analysis for codebases."""

__version__ = "0.1.0"
