"""alman - edit shell and git aliases in place"""

__version__ = "0.3.0"
