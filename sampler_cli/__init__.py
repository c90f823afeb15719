"""
sampler-cli: submit WAV files to the audio processing service from the terminal.
"""

__version__ = "0.3.0"
