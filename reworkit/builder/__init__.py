from reworkit.builder.build_executor import BuildExecutor, BuildOutcome, CommandResult
from reworkit.builder.package_lister import PackageLister

__all__ = [
    "BuildExecutor",
    "BuildOutcome",
    "CommandResult",
    "PackageLister",
]
