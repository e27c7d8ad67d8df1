from enum import Enum, auto

class CaretShape(Enum):
    BAR = auto()
    BLOCK = auto()
    UNDERSCORE = auto()

class BlinkStyle(Enum):
    BLINK = auto()   # hard on/off
    SMOOTH = auto()  # fade out, fade back in
    PHASE = auto()   # soft dip, never fully transparent
    EXPAND = auto()  # height pulses instead of opacity
    SOLID = auto()   # no blinking at all

# Below this a caret counts as settled, in pixels
MOVEMENT_EPSILON = 0.01
# Glyph used when there is no "next character" to measure
FALLBACK_CHAR = "m"
UNDERSCORE_HEIGHT = 2

class SettingsError(ValueError):
    pass


class AnimationSettings:
    """
    Process-wide caret animation options.

    The engine only ever reads these. Anything that wants to change them
    goes through update(), which validates first and applies nothing on error.
    """

    _FACTORS = ("smoothness", "catchup_speed", "max_catchup_speed")

    def __init__(self, enabled=True, caret_width=2, caret_shape=CaretShape.BAR,
                 blink_style=BlinkStyle.SMOOTH, blink_interval=500,
                 caret_height_margins=2, smoothness=0.15, catchup_speed=0.5,
                 max_catchup_speed=0.8, adaptive_speed=True,
                 resume_blink_delay=100, teleport_distance=1000.0,
                 replace_default_caret=True, caret_color=None):
        self.enabled = enabled
        self.caret_width = caret_width # Pixels
        self.caret_shape = caret_shape
        self.blink_style = blink_style
        self.blink_interval = blink_interval # Miliseconds
        self.caret_height_margins = caret_height_margins
        self.smoothness = smoothness
        self.catchup_speed = catchup_speed
        self.max_catchup_speed = max_catchup_speed
        self.adaptive_speed = adaptive_speed
        self.resume_blink_delay = resume_blink_delay # Miliseconds
        self.teleport_distance = teleport_distance
        self.replace_default_caret = replace_default_caret
        self.caret_color = caret_color # (R,G,B) or None for the editor foreground

    def as_dict(self):
        return dict(vars(self))

    def copy(self):
        return AnimationSettings(**self.as_dict())

    def validate(self):
        """Raises SettingsError describing the first bad value found."""
        if not isinstance(self.caret_shape, CaretShape):
            raise SettingsError(f"caret_shape must be a CaretShape, got {self.caret_shape!r}")
        if not isinstance(self.blink_style, BlinkStyle):
            raise SettingsError(f"blink_style must be a BlinkStyle, got {self.blink_style!r}")

        for name in self._FACTORS:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise SettingsError(f"{name} must be within [0, 1], got {value}")
        if self.catchup_speed < self.smoothness:
            raise SettingsError("catchup_speed must not be lower than smoothness")
        if self.max_catchup_speed < self.catchup_speed:
            raise SettingsError("max_catchup_speed must not be lower than catchup_speed")

        if self.blink_interval <= 0:
            raise SettingsError(f"blink_interval must be positive, got {self.blink_interval}")
        if self.caret_width < 1:
            raise SettingsError(f"caret_width must be at least 1px, got {self.caret_width}")
        if self.caret_height_margins < 0:
            raise SettingsError("caret_height_margins must not be negative")
        if self.resume_blink_delay < 0:
            raise SettingsError("resume_blink_delay must not be negative")
        if self.teleport_distance <= 0:
            raise SettingsError("teleport_distance must be positive")

    def update(self, **changes):
        unknown = set(changes) - set(vars(self))
        if unknown:
            raise SettingsError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        candidate = self.copy()
        for name, value in changes.items():
            setattr(candidate, name, value)
        candidate.validate()

        for name, value in changes.items():
            setattr(self, name, value)

    def reset_to_defaults(self):
        self.__dict__.update(AnimationSettings().as_dict())
