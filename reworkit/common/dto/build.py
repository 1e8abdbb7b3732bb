from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildResult(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    arch: str = Field(description="Target architecture identifier")
    success: bool = Field(description="Whether the build tool exited successfully")
    log: str = Field(description="Blob filename holding the build log")

    @field_validator("arch")
    @classmethod
    def validate_arch(cls, v: str) -> str:
        if not v:
            raise ValueError("arch must not be empty")
        return v


class Package(BaseModel):
    name: str = Field(description="Package directory name in the source tree")
    results: List[BuildResult] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("results")
    @classmethod
    def validate_unique_arch(cls, v: List[BuildResult]) -> List[BuildResult]:
        seen = set()
        for result in v:
            if result.arch in seen:
                raise ValueError(f"Duplicate result for arch {result.arch}")
            seen.add(result.arch)
        return v

    def get_result(self, arch: str) -> Optional[BuildResult]:
        for result in self.results:
            if result.arch == arch:
                return result
        return None

    def record(self, arch: str, success: bool, log: str) -> BuildResult:
        result = BuildResult(arch=arch, success=success, log=log)
        self.results = [r for r in self.results if r.arch != arch] + [result]
        return result

    def sorted(self) -> "Package":
        return Package(
            name=self.name,
            results=sorted(self.results, key=lambda r: r.arch),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "results": {
                r.arch: {"success": r.success, "log": r.log}
                for r in self.results
            },
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Package":
        raw_results = doc.get("results") or {}

        # Older documents stored results as a list of full records.
        if isinstance(raw_results, list):
            results = [BuildResult.model_validate(r) for r in raw_results]
        else:
            results = [
                BuildResult(arch=arch, success=value["success"], log=value["log"])
                for arch, value in raw_results.items()
            ]

        return cls(name=doc["name"], results=results)
