from dataclasses import dataclass
from pathlib import Path

import orjson

from finality_harness.env import HarnessEnv

from .action_spec import ActionSpec


# Reserved keys of the "timeouts" object; every other key names an action type.
DEFAULT_TIMEOUT_KEY = "default"
SCENARIO_TIMEOUT_KEY = "scenario"


@dataclass(slots=True)
class ScenarioSpec:
    name: str
    description: str | None
    env: HarnessEnv
    actions: list[ActionSpec]
    timeouts: dict[str, float]
    default_action_timeout_seconds: float | None
    scenario_timeout_seconds: float | None

    @classmethod
    def from_dict(cls, data: dict) -> "ScenarioSpec":
        if not data.get("name"):
            raise ValueError("Scenario requires a name")

        env_overrides = data.get("env") or {}
        if not isinstance(env_overrides, dict):
            raise ValueError("Scenario env must be an object of HARNESS_* overrides")

        timeouts = {
            key: float(value) for key, value in (data.get("timeouts") or {}).items()
        }
        default_timeout = timeouts.pop(DEFAULT_TIMEOUT_KEY, None)
        scenario_timeout = timeouts.pop(SCENARIO_TIMEOUT_KEY, None)

        return cls(
            name=data["name"],
            description=data.get("description"),
            env=HarnessEnv.model_validate(env_overrides),
            actions=[ActionSpec.from_dict(action) for action in data.get("actions", [])],
            timeouts=timeouts,
            default_action_timeout_seconds=default_timeout,
            scenario_timeout_seconds=scenario_timeout,
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "ScenarioSpec":
        return cls.from_dict(orjson.loads(Path(path).read_bytes()))
