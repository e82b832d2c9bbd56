"""Reporting pipeline.

Snapshot -> normalizer -> filter engine -> distribution, ranking and
time-series aggregators -> assembler -> DerivedReport. Every stage is a
pure function of its inputs; "today" is always passed in, never read from
the clock.
"""
