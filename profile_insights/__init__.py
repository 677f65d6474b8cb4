"""
Analyse sampled CPU profiles (.cpuprofile) and diff two runs.
"""
from .compare import compare_profiles, diff_profiles
from .errors import MalformedInput, ProfileError, SourceReadError
from .loader import load_pair, load_profile
from .model import Category, ParsedProfile, ProfileDiff, ViewMode
from .parser import parse_profile

__version__ = "0.1.0"

__all__ = [
    "Category",
    "MalformedInput",
    "ParsedProfile",
    "ProfileDiff",
    "ProfileError",
    "SourceReadError",
    "ViewMode",
    "compare_profiles",
    "diff_profiles",
    "load_pair",
    "load_profile",
    "parse_profile",
]
