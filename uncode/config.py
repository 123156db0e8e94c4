from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .logger import COMPONENTS, LEVELS


@dataclass
class Config:
    """Runtime options shared by the CLI and the Interpreter facade."""
    log_level: str = 'OFF'
    component_levels: Dict[str, str] = field(default_factory=dict)
    log_file: Optional[str] = None
    show_conditions: bool = False
    raise_on_error: bool = False

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f'unknown log level {self.log_level!r}')
        normalized = {}
        for component, level in self.component_levels.items():
            if component not in COMPONENTS:
                raise ValueError(f'unknown log component {component!r}')
            if level.upper() not in LEVELS:
                raise ValueError(f'unknown log level {level!r} for {component}')
            normalized[component] = level.upper()
        self.component_levels = normalized

    @property
    def logging_enabled(self) -> bool:
        if self.log_level != 'OFF' or self.show_conditions:
            return True
        return any(level != 'OFF' for level in self.component_levels.values())


def parse_component_level(text: str) -> Tuple[str, str]:
    """Parse a `component=LEVEL` option value."""
    component, sep, level = text.partition('=')
    if not sep or not component or not level:
        raise ValueError(f'expected COMPONENT=LEVEL, got {text!r}')
    component = component.strip().lower()
    level = level.strip().upper()
    if component not in COMPONENTS:
        raise ValueError(f"unknown component {component!r}; expected one of {', '.join(COMPONENTS)}")
    if level not in LEVELS:
        raise ValueError(f"unknown level {level!r}; expected one of {', '.join(LEVELS)}")
    return component, level
