"""
Payroll Kernel

Shared foundation for the payroll tax & statutory-compensation engine:
- Structured JSON logging
- Typed, coded exception hierarchy
- Immutable domain value objects (employee facts, pay periods, result records)
- Whole-rupiah arithmetic with explicit truncation
"""

__version__ = "0.1.0"
