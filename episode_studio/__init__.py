"""Episode Studio - character-reviewed episode generation"""

__version__ = "1.0.0"
