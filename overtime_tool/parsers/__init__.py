"""Input parsers."""
from overtime_tool.parsers.bundle_parser import AnalysisInputs, load_bundle, parse_bundle

__all__ = ["AnalysisInputs", "load_bundle", "parse_bundle"]
