"""CrateSelector — name/version filter over the package universe."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CrateSelector:
    """Selects package versions by name and version.

    An absent ``name`` matches every package. An absent ``version`` matches
    every version of the matched name. The same type describes the crate a
    review or flag proof is about; there an absent version means the proof
    applies to all versions.

    Parameters
    ----------
    name:
        Package name, or None for any package.
    version:
        Exact version string, or None for any version.
    """

    name: str | None = None
    version: str | None = None

    def __post_init__(self) -> None:
        if self.name is None and self.version is not None:
            raise ValueError("A crate selector with a version must also name the crate.")

    @classmethod
    def parse(cls, text: str) -> "CrateSelector":
        """Parse ``name``, ``name@version`` or ``*``."""
        text = text.strip()
        if text in ("", "*"):
            return cls()
        name, sep, version = text.partition("@")
        if not name:
            raise ValueError(f"Crate selector {text!r} has an empty name.")
        if sep and not version:
            raise ValueError(f"Crate selector {text!r} has an empty version.")
        return cls(name=name, version=version or None)

    def matches(self, crate: "CrateSelector") -> bool:
        """Return True if the *crate* a proof is about falls within this selector."""
        if self.name is not None and crate.name != self.name:
            return False
        if self.version is not None and crate.version is not None:
            return crate.version == self.version
        return True

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "CrateSelector":
        name = data.get("name")
        version = data.get("version")
        return cls(
            name=str(name) if name is not None else None,
            version=str(version) if version is not None else None,
        )

    def __str__(self) -> str:
        if self.name is None:
            return "*"
        if self.version is None:
            return self.name
        return f"{self.name}@{self.version}"
