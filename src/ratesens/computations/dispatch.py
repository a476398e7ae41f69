"""
Rate computation dispatcher.

Routes each computation record to the function that knows how to price it,
through an explicit type table.
"""

from datetime import date
from typing import Any, Dict, Optional, Type

from ..errors import DomainError
from ..sensitivity.point import PointSensitivityBuilder
from .explain import ExplainMapBuilder
from .ibor import (
    ForwardIborAveragedRateComputationFn,
    ForwardIborRateComputationFn,
    IborAveragedRateComputation,
    IborRateComputation,
)
from .inflation import ForwardInflationInterpolatedRateComputationFn, InflationInterpolatedRateComputation
from .overnight import (
    ApproxForwardOvernightAveragedRateComputationFn,
    ForwardOvernightAveragedRateComputationFn,
    ForwardOvernightCompoundedRateComputationFn,
    OvernightAveragedRateComputation,
    OvernightCompoundedRateComputation,
)


class DispatchingRateComputationFn:
    """
    Rate function delegating on the computation type.

    Args:
        functions: Optional overrides of the default function per computation type
        approximate_averaged: Use the approximate function for averaged overnight rates
    """

    def __init__(self, functions: Optional[Dict[Type, Any]] = None, approximate_averaged: bool = True):
        averaged = (ApproxForwardOvernightAveragedRateComputationFn() if approximate_averaged
                    else ForwardOvernightAveragedRateComputationFn())
        self._functions: Dict[Type, Any] = {
            IborRateComputation: ForwardIborRateComputationFn(),
            IborAveragedRateComputation: ForwardIborAveragedRateComputationFn(),
            OvernightCompoundedRateComputation: ForwardOvernightCompoundedRateComputationFn(),
            OvernightAveragedRateComputation: averaged,
            InflationInterpolatedRateComputation: ForwardInflationInterpolatedRateComputationFn(),
        }
        if functions:
            self._functions.update(functions)

    def _function(self, computation):
        fn = self._functions.get(type(computation))
        if fn is None:
            raise DomainError(f"Unknown rate computation type: {type(computation).__name__}")
        return fn

    def rate(self, computation, start_date: date, end_date: date, provider) -> float:
        return self._function(computation).rate(computation, start_date, end_date, provider)

    def rate_sensitivity(self, computation, start_date: date, end_date: date, provider) -> PointSensitivityBuilder:
        return self._function(computation).rate_sensitivity(computation, start_date, end_date, provider)

    def explain_rate(
        self,
        computation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        return self._function(computation).explain_rate(computation, start_date, end_date, provider, builder)


__all__ = ["DispatchingRateComputationFn"]
