from dataclasses import dataclass


@dataclass(frozen=True)
class Version:
    """
    A four-part version number.
    Components left unset are -1, so "1.2" and "1.2.0.0" stay distinguishable.
    """

    major: int
    minor: int
    build: int = -1
    revision: int = -1

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0:
            raise ValueError(
                f"Version major and minor must be >= 0, got {self.major}.{self.minor}"
            )
        if self.build < -1 or self.revision < -1:
            raise ValueError("Version build and revision must be >= 0 or -1 (unset)")
        if self.build == -1 and self.revision != -1:
            raise ValueError("Version revision cannot be set without build")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a dotted version string with 2 to 4 components, e.g. "1.2.3.4".
        """
        parts = text.strip().split(".")
        if not 2 <= len(parts) <= 4:
            raise ValueError(f"Invalid version string '{text}'")
        try:
            numbers = [int(p) for p in parts]
        except ValueError:
            raise ValueError(f"Invalid version string '{text}'") from None
        # -1 means unset, it is never a valid parsed component
        if any(n < 0 for n in numbers):
            raise ValueError(f"Invalid version string '{text}'")
        return cls(*numbers)

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.build, self.revision]
        return ".".join(str(p) for p in parts if p != -1)
