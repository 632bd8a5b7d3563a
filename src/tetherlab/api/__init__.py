from .scenario import Scenario
