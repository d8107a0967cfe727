"""A small Unix userland: file tools, simple shells, stress programs and shared helpers."""

__version__ = "0.1.0"