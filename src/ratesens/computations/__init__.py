"""
Computations package - forward rates of accrual periods.

Provides:
- Overnight compounded and averaged rates with fixing, forward and cutoff regions
- Single and averaged Ibor rates
- Interpolated inflation rates
- A dispatcher and explain maps for audit breakdowns
"""

from .explain import ExplainKey, ExplainMap, ExplainMapBuilder
from .overnight import (
    OvernightCompoundedRateComputation,
    OvernightAveragedRateComputation,
    ForwardOvernightCompoundedRateComputationFn,
    ForwardOvernightAveragedRateComputationFn,
    ApproxForwardOvernightAveragedRateComputationFn,
)
from .ibor import (
    IborRateComputation,
    IborAveragedFixing,
    IborAveragedRateComputation,
    ForwardIborRateComputationFn,
    ForwardIborAveragedRateComputationFn,
)
from .inflation import (
    InflationInterpolatedRateComputation,
    ForwardInflationInterpolatedRateComputationFn,
)
from .dispatch import DispatchingRateComputationFn

__all__ = [
    "ExplainKey",
    "ExplainMap",
    "ExplainMapBuilder",
    "OvernightCompoundedRateComputation",
    "OvernightAveragedRateComputation",
    "ForwardOvernightCompoundedRateComputationFn",
    "ForwardOvernightAveragedRateComputationFn",
    "ApproxForwardOvernightAveragedRateComputationFn",
    "IborRateComputation",
    "IborAveragedFixing",
    "IborAveragedRateComputation",
    "ForwardIborRateComputationFn",
    "ForwardIborAveragedRateComputationFn",
    "InflationInterpolatedRateComputation",
    "ForwardInflationInterpolatedRateComputationFn",
    "DispatchingRateComputationFn",
]
