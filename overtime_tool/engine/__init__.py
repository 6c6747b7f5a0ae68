"""Analysis and validation engines."""
from overtime_tool.engine.validator import collect_diagnostics, validate_inputs
from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.engine.hours_splitter import apply_tail_attribution

__all__ = ["collect_diagnostics", "validate_inputs", "calculate_analysis", "apply_tail_attribution"]
