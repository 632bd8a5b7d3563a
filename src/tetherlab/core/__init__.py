from .solver import ConstraintSolver, RelaxResult
