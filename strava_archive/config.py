"""
Export configuration (Pydantic model) for one run.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from strava_archive.services.canonicalizer import STRIDE


class ExportConfig(BaseModel):
    """Parameters of one archive export."""
    source_dir: Path
    year: int = Field(default=0, ge=0, description="Calendar year to export, 0 for all years")
    out_file: Optional[Path] = None
    stride: int = Field(default=STRIDE, ge=1, description="Keep one sample in every `stride`")
    verbose: bool = False

    @property
    def resolved_out_file(self) -> Path:
        """Output CSV path, `<year>.csv` in the working directory by default."""
        if self.out_file is not None:
            return self.out_file
        return Path(f"{self.year}.csv")
