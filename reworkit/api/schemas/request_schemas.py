from typing import Dict, Optional

from pydantic import BaseModel, Field

from reworkit.common.config.constants import log_filename
from reworkit.common.exceptions.base_exceptions import ValidationException


REQUIRED_FIELDS = ("package", "arch", "success")
NON_EMPTY_FIELDS = ("package", "arch")


class LogSubmission(BaseModel):
    package: str = Field(min_length=1, description="Package name")
    arch: str = Field(min_length=1, description="Architecture the package was built for")
    success: bool = Field(description="Build outcome")
    log: bytes = Field(default=b"", description="Gzip-compressed build log")

    @property
    def filename(self) -> str:
        return log_filename(self.package, self.arch)

    @classmethod
    def from_form(cls, fields: Dict[str, str], log: Optional[bytes] = None) -> "LogSubmission":
        for name in REQUIRED_FIELDS:
            if name not in fields:
                raise ValidationException.missing_field(name)

        # Both end up in the blob filename and the store key.
        for name in NON_EMPTY_FIELDS:
            if not fields[name]:
                raise ValidationException.empty_field(name)

        return cls(
            package=fields["package"],
            arch=fields["arch"],
            success=fields["success"] == "true",
            log=log or b"",
        )
