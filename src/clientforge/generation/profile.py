from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationProfile:
    """Target-interpreter features the rendered code may rely on."""

    use_pep604: bool
    use_kw_only_dataclasses: bool
    use_typing_extensions: bool

    @classmethod
    def from_version(cls, target_version: str | tuple[int, int]) -> "GenerationProfile":
        if isinstance(target_version, str):
            parts = target_version.split(".")
            major = int(parts[0])
            minor = int(parts[1]) if len(parts) > 1 else 0
        else:
            major, minor = target_version
        if (major, minor) <= (3, 9):
            return cls(
                use_pep604=False,
                use_kw_only_dataclasses=False,
                use_typing_extensions=True,
            )
        if (major, minor) == (3, 10):
            return cls(
                use_pep604=True,
                use_kw_only_dataclasses=True,
                use_typing_extensions=True,
            )
        return cls(
            use_pep604=True,
            use_kw_only_dataclasses=True,
            use_typing_extensions=False,
        )

    def union(self, types: list[str]) -> str:
        if not types:
            return ""
        if len(types) == 1:
            return types[0]
        if self.use_pep604:
            return " | ".join(types)
        return f"Union[{', '.join(types)}]"

    def optional(self, base: str) -> str:
        if self.use_pep604:
            return f"{base} | None"
        return f"Optional[{base}]"
