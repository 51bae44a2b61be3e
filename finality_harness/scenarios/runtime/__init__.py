from .scenario_runtime import ScenarioRuntime as ScenarioRuntime
