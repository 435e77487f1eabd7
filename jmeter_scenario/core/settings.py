"""Compiler settings: thread group load profile and fixed plan identity."""

from dataclasses import dataclass, fields
from typing import Any, Optional

from jmeter_scenario.exceptions import ScenarioValidationException

DEFAULT_LISTENER_CLASSNAME = "io.metersphere.api.jmeter.APIBackendListenerClient"


@dataclass
class CompilerSettings:
    """Settings applied to every compiled test plan.

    Attributes:
        threads: Number of threads per thread group (default: 1)
        ramp_time: Ramp-up period in seconds (default: 1)
        loops: Iterations per thread (default: 1)
        on_sample_error: Thread group action on sampler error (default: "continue")
        listener_classname: Backend listener client class added to every
            thread group
        jmeter_version: Value of the root "jmeter" attribute
    """

    threads: int = 1
    ramp_time: int = 1
    loops: int = 1
    on_sample_error: str = "continue"
    listener_classname: str = DEFAULT_LISTENER_CLASSNAME
    jmeter_version: str = "5.2.1"

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "CompilerSettings":
        """Build settings from a scenario file's ``settings`` section.

        Args:
            data: Mapping of setting name to value (None means defaults).
                ``rampup`` is accepted as an alias of ``ramp_time``.

        Returns:
            CompilerSettings instance

        Raises:
            ScenarioValidationException: If a value has the wrong type
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ScenarioValidationException(
                f"Invalid 'settings': expected dictionary, got {type(data).__name__}"
            )

        data = dict(data)
        if "rampup" in data and "ramp_time" not in data:
            data["ramp_time"] = data.pop("rampup")

        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            raw = data[f.name]
            if f.type is int:
                try:
                    values[f.name] = int(raw)
                except (TypeError, ValueError) as e:
                    raise ScenarioValidationException(
                        f"Invalid setting '{f.name}': expected integer, got {raw!r}"
                    ) from e
            else:
                values[f.name] = str(raw)

        return cls(**values).validated()

    def override(self, **overrides: Any) -> "CompilerSettings":
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return CompilerSettings(**values).validated()

    def validated(self) -> "CompilerSettings":
        """Check value ranges.

        Raises:
            ScenarioValidationException: If a numeric setting is out of range
        """
        if self.threads < 1:
            raise ScenarioValidationException(f"'threads' must be >= 1 (found: {self.threads})")
        if self.ramp_time < 0:
            raise ScenarioValidationException(f"'ramp_time' must be >= 0 (found: {self.ramp_time})")
        if self.loops < -1 or self.loops == 0:
            raise ScenarioValidationException(
                f"'loops' must be a positive number or -1 for infinite (found: {self.loops})"
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
