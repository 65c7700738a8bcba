"""MegaHAL-style Markov chain chat bot brain: learning, replies, brain files and training."""

__version__ = "1.0.0"