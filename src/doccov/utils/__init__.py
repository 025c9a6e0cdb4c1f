"""Shared helpers: interval algebra, path safety and source file discovery."""
