from .action_spec import ActionSpec as ActionSpec
from .scenario_spec import ScenarioSpec as ScenarioSpec
