"""
datagraph - A data/control node graph with on-demand output resolution.

Data nodes hold payloads; control nodes describe a computation over
the nodes feeding them through "input" edges. Resolving a control
node runs its logic type's strategy over those inputs.
"""

__version__ = "0.1.0"
