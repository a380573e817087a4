"""
Inkboard - Shape transform and selection engine for vector drawing surfaces.
"""

__version__ = "0.1.0"
__app_name__ = "Inkboard"
