from reworkit.common.dto.build import BuildResult, Package

__all__ = [
    "BuildResult",
    "Package",
]
