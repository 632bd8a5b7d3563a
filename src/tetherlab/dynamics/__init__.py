from .body import PointBody2D
from .forces import Force, Thrust, VelocityDamping
from .chain import ParticleChain, segment_count
from .constraints import Constraint, SegmentConstraint, SpanConstraint, chain_constraints
