"""posereview - frame-by-frame pose overlay review for recorded activity video"""

__version__ = "0.1.0"
