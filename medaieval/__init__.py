"""MedAIEval: clinical question practice backed by a multi-provider AI gateway."""

__version__ = "0.1.0"
