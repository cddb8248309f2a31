import os
from collections.abc import Mapping
from dataclasses import dataclass, field

ENV_PREFIX = "AGENTWEAVE_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class AgentConfig:
    """Configuration for the weaving and sampling agent."""

    enabled: bool = True
    disabled_modules: frozenset[str] = field(default_factory=frozenset)
    capture_diagnostics: bool = False
    log_advice_faults: bool = True

    def __post_init__(self):
        self.disabled_modules = frozenset(self.disabled_modules)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AgentConfig":
        """Build a configuration from ``AGENTWEAVE_*`` environment variables.

        Recognized variables: ``AGENTWEAVE_ENABLED``,
        ``AGENTWEAVE_DISABLED_MODULES`` (comma separated),
        ``AGENTWEAVE_CAPTURE_DIAGNOSTICS`` and
        ``AGENTWEAVE_LOG_ADVICE_FAULTS``. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()
        if (raw := env.get(ENV_PREFIX + "ENABLED")) is not None:
            config.enabled = _parse_bool(ENV_PREFIX + "ENABLED", raw)
        if (raw := env.get(ENV_PREFIX + "DISABLED_MODULES")) is not None:
            config.disabled_modules = frozenset(
                name.strip() for name in raw.split(",") if name.strip()
            )
        if (raw := env.get(ENV_PREFIX + "CAPTURE_DIAGNOSTICS")) is not None:
            config.capture_diagnostics = _parse_bool(ENV_PREFIX + "CAPTURE_DIAGNOSTICS", raw)
        if (raw := env.get(ENV_PREFIX + "LOG_ADVICE_FAULTS")) is not None:
            config.log_advice_faults = _parse_bool(ENV_PREFIX + "LOG_ADVICE_FAULTS", raw)
        return config

    def is_module_enabled(self, name: str) -> bool:
        return self.enabled and name not in self.disabled_modules

    def with_disabled_modules(self, *names: str) -> "AgentConfig":
        """Disable instrumentation modules by name.

        Args:
            names: Names of InstrumentationModule instances to skip

        Returns:
            Self for method chaining
        """
        self.disabled_modules = self.disabled_modules | frozenset(names)
        return self

    def with_diagnostics(self, enabled: bool = True) -> "AgentConfig":
        """Toggle capture of agent diagnostics into a ring buffer.

        Returns:
            Self for method chaining
        """
        self.capture_diagnostics = enabled
        return self
