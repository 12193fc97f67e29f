"""
chartpilot - Chart Control and Trade-Plan Orchestration Engine

Lets a human or a language-model agent drive a live charting surface through a
single action vocabulary, sequences those actions with pacing, narration and
cancellation, and derives structurally valid trade plans whose shape is
governed by a complexity tier.
"""

__version__ = "0.1.0"
__author__ = "chartpilot Team"
